"""
Complaint Routes for residents
"""

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from complaintdesk.schemas import ComplaintCreate, ComplaintEdit, PaymentRequest, parse
from complaintdesk.services.complaint_service import ComplaintService
from complaintdesk.utils.decorators import current_principal

complaints_bp = Blueprint('complaints', __name__)


@complaints_bp.route('', methods=['POST'])
@jwt_required()
def submit_complaint():
    """Submit a new complaint"""
    data = parse(ComplaintCreate, request.get_json(silent=True))
    complaint = ComplaintService.create_complaint(current_principal(), data)

    return jsonify({
        'message': 'Complaint submitted successfully',
        'complaint': complaint.to_dict()
    }), 201


@complaints_bp.route('', methods=['GET'])
@jwt_required()
def get_my_complaints():
    """Get the current user's complaints, newest first"""
    complaints = ComplaintService.list_own(current_principal())

    return jsonify({
        'complaints': [complaint.to_dict() for complaint in complaints]
    }), 200


@complaints_bp.route('/<int:complaint_id>', methods=['GET'])
@jwt_required()
def get_complaint(complaint_id):
    """Get complaint details"""
    complaint = ComplaintService.get_complaint(current_principal(), complaint_id)

    return jsonify({
        'complaint': complaint.to_dict()
    }), 200


@complaints_bp.route('/<int:complaint_id>', methods=['PUT'])
@jwt_required()
def update_complaint(complaint_id):
    """Edit a pending complaint"""
    data = parse(ComplaintEdit, request.get_json(silent=True))
    complaint = ComplaintService.edit_complaint(current_principal(), complaint_id, data)

    return jsonify({
        'message': 'Complaint updated successfully',
        'complaint': complaint.to_dict()
    }), 200


@complaints_bp.route('/<int:complaint_id>', methods=['DELETE'])
@jwt_required()
def delete_complaint(complaint_id):
    """Delete a pending complaint"""
    ComplaintService.delete_complaint(current_principal(), complaint_id)

    return jsonify({
        'message': 'Complaint removed'
    }), 200


@complaints_bp.route('/<int:complaint_id>/payment', methods=['POST'])
@jwt_required()
def pay_complaint(complaint_id):
    """Pay for a resolved complaint, closing it"""
    data = parse(PaymentRequest, request.get_json(silent=True))
    complaint = ComplaintService.pay(current_principal(), complaint_id, data)

    return jsonify({
        'success': True,
        'message': 'Payment successful',
        'complaint': complaint.to_dict()
    }), 200
