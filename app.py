import os
from datetime import datetime, timedelta

import pytz
from dotenv import load_dotenv
from flask import Flask, abort, render_template, request, jsonify, redirect, url_for, session

load_dotenv()

from models import db, User, Task
from services.validation_service import parse_week_start_day
from text_helpers import format_time_12h, linkify_text

app = Flask(__name__)
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///tasks.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=30)
app.config['API_SHARED_KEY'] = os.environ.get('API_SHARED_KEY')  # Optional shared key for API callers
app.config['DEFAULT_TIMEZONE'] = os.environ.get('DEFAULT_TIMEZONE', 'America/New_York')
app.config['WEEK_START_DAY'] = parse_week_start_day(os.environ.get('WEEK_START_DAY'))  # 0 = Sunday

app.jinja_env.filters['linkify'] = linkify_text
app.jinja_env.filters['time12'] = format_time_12h

db.init_app(app)

def get_current_user():
    """Resolve the current user from a shared API key + user id header, else fall back to session."""
    # Header-based auth for service callers
    api_key = request.headers.get('X-API-Key')
    api_user_id = request.headers.get('X-User-Id')
    shared_key = app.config.get('API_SHARED_KEY')
    if shared_key and api_key and api_user_id:
        try:
            api_uid_int = int(api_user_id)
        except (TypeError, ValueError):
            api_uid_int = None
        if api_uid_int and api_key == shared_key:
            user = db.session.get(User, api_uid_int)
            if user:
                return user

    # Session-based auth for browser users
    user_id = session.get('user_id')
    if user_id:
        return db.session.get(User, user_id)
    return None


def _now_local():
    """Current wall-clock time in the configured timezone, as a naive datetime."""
    tz = pytz.timezone(app.config['DEFAULT_TIMEZONE'])
    return datetime.now(tz).replace(tzinfo=None)


with app.app_context():
    db.create_all()


from services import page_routes, task_routes, user_routes


# Pages
@app.route('/')
def index():
    return page_routes.index()

@app.route('/register')
def register_page():
    return page_routes.register_page()

@app.route('/tasks')
def tasks_page():
    return page_routes.tasks_page()

@app.route('/add-task')
def add_task_page():
    return page_routes.add_task_page()

@app.route('/edit-task/<int:task_id>')
def edit_task_page(task_id):
    return page_routes.edit_task_page(task_id)

@app.route('/logout')
def logout():
    return user_routes.logout_page()


# Users
@app.route('/api/users', methods=['GET', 'POST'])
def handle_users():
    return user_routes.handle_users()

@app.route('/api/users/login', methods=['POST'])
def login():
    return user_routes.login()

@app.route('/api/logout', methods=['POST'])
def api_logout():
    return user_routes.api_logout()

@app.route('/api/current-user')
def current_user_info():
    return user_routes.current_user_info()


# Tasks
@app.route('/api/tasks', methods=['GET', 'POST'])
def handle_tasks():
    return task_routes.handle_tasks()

@app.route('/api/tasks/week', methods=['GET'])
def tasks_week():
    return task_routes.tasks_week()

@app.route('/api/tasks/<int:task_id>', methods=['GET', 'PUT', 'DELETE'])
def handle_task(task_id):
    return task_routes.handle_task(task_id)


@app.errorhandler(404)
def not_found(error):
    if request.path.startswith('/api/'):
        return jsonify({'error': 'Not found'}), 404
    return render_template('not_found.html'), 404


if __name__ == '__main__':
    app.run(debug=True)
