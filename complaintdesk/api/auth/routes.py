"""
Authentication Routes
"""

from flask import Blueprint, g, request, jsonify
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity
)
from extensions import limiter
from complaintdesk.access import Principal
from complaintdesk.schemas import LoginRequest, RegisterRequest, parse
from complaintdesk.services.user_service import UserService
from complaintdesk.utils.decorators import current_principal

auth_bp = Blueprint('auth', __name__)


def issue_tokens(user):
    """Tokens carry only the user id; role is re-read per request"""
    return {
        'access_token': create_access_token(identity=str(user.id)),
        'refresh_token': create_refresh_token(identity=str(user.id)),
    }


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("5 per hour")
def register():
    """Register a new resident"""
    data = parse(RegisterRequest, request.get_json(silent=True))
    user = UserService.register(Principal.anonymous(), data)

    return jsonify({
        'message': 'User registered successfully',
        'user': user.to_dict(),
        **issue_tokens(user)
    }), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("50 per hour")
def login():
    """Login user"""
    data = parse(LoginRequest, request.get_json(silent=True))
    user = UserService.authenticate(Principal.anonymous(), data)

    return jsonify({
        'message': 'Login successful',
        'user': user.to_dict(),
        **issue_tokens(user)
    }), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """Refresh access token"""
    current_principal()
    access_token = create_access_token(identity=get_jwt_identity())

    return jsonify({
        'access_token': access_token
    }), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    """Get current authenticated user"""
    current_principal()

    return jsonify({
        'user': g.current_user.to_dict()
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """Logout user (client should delete token)"""
    return jsonify({
        'message': 'Logout successful'
    }), 200
