"""
Admin Routes
"""

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from complaintdesk.schemas import PasswordReset, RoleUpdate, StatusUpdate, parse
from complaintdesk.services.complaint_service import ComplaintService
from complaintdesk.services.user_service import UserService
from complaintdesk.utils.decorators import admin_required, current_principal

admin_bp = Blueprint('admin', __name__)


# Complaint management

@admin_bp.route('/complaints', methods=['GET'])
@jwt_required()
@admin_required()
def get_all_complaints():
    """Get all complaints, optionally filtered by status"""
    complaints = ComplaintService.list_all(current_principal(), status=request.args.get('status'))

    return jsonify({
        'complaints': [complaint.to_dict() for complaint in complaints],
        'total': len(complaints)
    }), 200


@admin_bp.route('/complaints/<int:complaint_id>', methods=['GET'])
@jwt_required()
@admin_required()
def get_complaint(complaint_id):
    complaint = ComplaintService.get_complaint(current_principal(), complaint_id)
    return jsonify({'complaint': complaint.to_dict()}), 200


@admin_bp.route('/complaints/<int:complaint_id>', methods=['PUT'])
@jwt_required()
@admin_required()
def update_complaint_status(complaint_id):
    """Change status, comments, payment amount or assignment"""
    data = parse(StatusUpdate, request.get_json(silent=True))
    complaint = ComplaintService.set_status(current_principal(), complaint_id, data)

    return jsonify({
        'success': True,
        'complaint': complaint.to_dict()
    }), 200


@admin_bp.route('/complaints/<int:complaint_id>', methods=['DELETE'])
@jwt_required()
@admin_required()
def delete_complaint(complaint_id):
    ComplaintService.delete_complaint(current_principal(), complaint_id)
    return jsonify({'message': 'Complaint deleted'}), 200


# User management

@admin_bp.route('/users', methods=['GET'])
@jwt_required()
@admin_required()
def get_all_users():
    """Get all resident accounts"""
    users = UserService.list_users(current_principal())

    return jsonify({
        'users': [user.to_dict() for user in users],
        'total': len(users)
    }), 200


@admin_bp.route('/users/<int:user_id>', methods=['GET'])
@jwt_required()
@admin_required()
def get_user(user_id):
    user = UserService.get_user(current_principal(), user_id)
    return jsonify({'user': user.to_dict()}), 200


@admin_bp.route('/users/<int:user_id>/role', methods=['PUT'])
@jwt_required()
@admin_required()
def update_user_role(user_id):
    """Promote or demote an account"""
    data = parse(RoleUpdate, request.get_json(silent=True))
    user = UserService.update_role(current_principal(), user_id, data.role)

    return jsonify({
        'message': 'User role updated',
        'user': user.to_dict()
    }), 200


@admin_bp.route('/users/<int:user_id>/reset-password', methods=['PUT'])
@jwt_required()
@admin_required()
def reset_user_password(user_id):
    data = parse(PasswordReset, request.get_json(silent=True))
    UserService.reset_password(current_principal(), user_id, data.new_password)

    return jsonify({'message': 'User password reset successfully'}), 200


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@jwt_required()
@admin_required()
def delete_user(user_id):
    """Delete a user and all of their complaints"""
    deleted = UserService.delete_user(current_principal(), user_id)

    return jsonify({
        'message': 'User deleted successfully',
        'complaints_deleted': deleted
    }), 200


# Dashboard stats

@admin_bp.route('/stats', methods=['GET'])
@jwt_required()
@admin_required()
def get_stats():
    return jsonify(ComplaintService.stats(current_principal())), 200


@admin_bp.route('/stats/monthly', methods=['GET'])
@jwt_required()
@admin_required()
def get_monthly_stats():
    return jsonify({'months': ComplaintService.monthly_stats(current_principal())}), 200
