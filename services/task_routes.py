"""Task CRUD and week-grid routes."""

from calendar_view import READY, WeekView
from services.task_source import fetch_tasks, user_tasks_query
from services.validation_service import TaskValidationError, parse_day_value, validate_task_payload


def owned_task_or_404(task_id, user):
    import app as a

    return a.Task.query.filter_by(id=task_id, user_id=user.id).first_or_404()


def handle_tasks():
    import app as a

    Task = a.Task
    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    user = get_current_user()
    if not user:
        return jsonify({'error': 'Not signed in'}), 401

    if request.method == 'GET':
        tasks = user_tasks_query(user.id).all()
        return jsonify({'tasks': [t.to_dict() for t in tasks]})

    data = request.get_json(silent=True) or {}
    try:
        fields = validate_task_payload(data)
    except TaskValidationError as exc:
        return jsonify({'error': str(exc)}), 400

    task = Task(user_id=user.id, **fields)
    db.session.add(task)
    db.session.commit()
    a.app.logger.info("Created task %s for user %s", task.id, user.id)
    return jsonify({'message': 'Task added successfully', 'task': task.to_dict()}), 201


def handle_task(task_id):
    import app as a

    db = a.db
    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    user = get_current_user()
    if not user:
        return jsonify({'error': 'Not signed in'}), 401

    task = owned_task_or_404(task_id, user)

    if request.method == 'GET':
        return jsonify({'task': task.to_dict()})

    if request.method == 'DELETE':
        db.session.delete(task)
        db.session.commit()
        a.app.logger.info("Deleted task %s for user %s", task_id, user.id)
        return jsonify({'message': 'Task deleted'})

    data = request.get_json(silent=True) or {}
    try:
        fields = validate_task_payload(data, partial=True, current=task.to_dict())
    except TaskValidationError as exc:
        return jsonify({'error': str(exc)}), 400

    for key, value in fields.items():
        setattr(task, key, value)
    db.session.commit()
    a.app.logger.info("Updated task %s for user %s", task.id, user.id)
    return jsonify({'message': 'Task updated', 'task': task.to_dict()})


def parse_week_reference(reference_raw):
    """
    Reference date of a week request: today when absent, None when malformed.
    Both the page and the JSON endpoint answer 400 for a malformed date.
    """
    import app as a

    if not reference_raw:
        return a._now_local().date()
    return parse_day_value(reference_raw)


def build_week_view(user, reference):
    """Load the signed-in user's week view for the week containing ``reference``."""
    import app as a

    view = WeekView(fetch_tasks, user.id, reference, week_start=a.app.config['WEEK_START_DAY'])
    return view.load()


def tasks_week():
    import app as a

    get_current_user = a.get_current_user
    jsonify = a.jsonify
    request = a.request

    user = get_current_user()
    if not user:
        return jsonify({'error': 'Not signed in'}), 401

    reference = parse_week_reference(request.args.get('date'))
    if reference is None:
        return jsonify({'error': 'Invalid date'}), 400

    view = build_week_view(user, reference)
    if view.state != READY:
        a.app.logger.error("Week view for user %s failed to load", user.id)
        return jsonify(view.to_dict()), 500
    return jsonify(view.to_dict())
