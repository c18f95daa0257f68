"""User registration and session routes."""

from sqlalchemy.exc import IntegrityError

from services.validation_service import MIN_PASSWORD_LENGTH, is_valid_email, normalize_email


def handle_users():
    import app as a

    User = a.User
    db = a.db
    jsonify = a.jsonify
    request = a.request

    if request.method == 'GET':
        users = User.query.order_by(User.id.asc()).all()
        return jsonify({'users': [u.to_dict() for u in users]})

    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    name = str(data.get('name') or '').strip()
    email = normalize_email(data.get('email'))
    password = str(data.get('password') or '')

    if not name or not email or not password:
        return jsonify({'error': 'Name, email, and password are required.'}), 400
    if not is_valid_email(email):
        return jsonify({'error': 'Invalid email address.'}), 400
    if len(password) < MIN_PASSWORD_LENGTH:
        return jsonify({'error': f'Password must be at least {MIN_PASSWORD_LENGTH} characters.'}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({'error': 'User with this email already exists.'}), 409

    user = User(name=name, email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'User with this email already exists.'}), 409

    a.app.logger.info("Registered user %s", user.id)
    return jsonify({'message': 'User added successfully.', 'userId': user.id}), 201


def login():
    import app as a

    User = a.User
    jsonify = a.jsonify
    request = a.request
    session = a.session

    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    email = normalize_email(data.get('email'))
    password = str(data.get('password') or '')

    if not email or not password:
        return jsonify({'error': 'Email and password are required.'}), 400

    user = User.query.filter_by(email=email).first()
    if not user:
        a.app.logger.info("Login failed: unknown email")
        return jsonify({'error': 'Invalid email'}), 401
    if not user.check_password(password):
        a.app.logger.info("Login failed for user %s: bad password", user.id)
        return jsonify({'error': 'Invalid password'}), 401

    session['user_id'] = user.id
    session.permanent = True
    return jsonify({'message': 'Login successful', 'user_id': user.id, 'name': user.name})


def api_logout():
    import app as a

    a.session.pop('user_id', None)
    return a.jsonify({'success': True})


def logout_page():
    import app as a

    a.session.pop('user_id', None)
    return a.redirect(a.url_for('index'))


def current_user_info():
    import app as a

    get_current_user = a.get_current_user
    jsonify = a.jsonify

    user = get_current_user()
    if user:
        return jsonify({'user_id': user.id, 'name': user.name, 'email': user.email})
    return jsonify({'user_id': None, 'name': None, 'email': None})
