"""Admin authentication: one shared password, a session and a signed token."""

from typing import Optional

from flask import current_app, jsonify
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from quizboard import bcrypt, login_manager
from quizboard.models import AdminUser

TOKEN_SALT = 'quizboard-admin'


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def check_password(password: str) -> bool:
    return bcrypt.check_password_hash(current_app.config['ADMIN_PASSWORD_HASH'], password)


def issue_token() -> str:
    return _serializer().dumps({'role': 'admin'})


def verify_token(token: str) -> Optional[AdminUser]:
    max_age = current_app.config.get('ADMIN_TOKEN_MAX_AGE_SEC', 12 * 3600)
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        current_app.logger.info("[auth] expired admin token")
        return None
    except BadSignature:
        return None
    if isinstance(payload, dict) and payload.get('role') == 'admin':
        return AdminUser()
    return None


def init_auth(flask_app) -> None:
    flask_app.config['ADMIN_PASSWORD_HASH'] = bcrypt.generate_password_hash(
        flask_app.config['ADMIN_PASSWORD']
    ).decode('utf-8')

    @login_manager.user_loader
    def load_user(user_id):
        return AdminUser() if user_id == AdminUser.id else None

    @login_manager.request_loader
    def load_user_from_request(request):
        header = request.headers.get('Authorization', '')
        if header.startswith('Bearer '):
            return verify_token(header[len('Bearer '):].strip())
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Admin authentication required'}), 401
