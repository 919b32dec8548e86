from flask import Blueprint, current_app, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user

from quizboard.auth import check_password, issue_token
from quizboard.models import AdminUser
from quizboard.schemas import LoginRequest

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Quiz scoreboard server'})

@main.route('/auth/login', methods=['POST'])
def login():
    body = LoginRequest.model_validate(request.get_json(silent=True) or {})
    if not check_password(body.password):
        current_app.logger.warning("[auth] rejected admin login")
        return jsonify({'error': 'Invalid password'}), 401
    admin = AdminUser()
    login_user(admin, remember=True)
    return jsonify({'token': issue_token(), 'user': admin.to_dict()})

@main.route('/auth/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})

@main.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})
