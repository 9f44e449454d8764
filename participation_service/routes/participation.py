from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from participation_service.auth import current_identity
from participation_service.services import participation_service, payment_service, verification_service
from participation_service.services.reporting_service import all_participations, my_participations

participation_bp = Blueprint('participations', __name__)


def page_args():
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', current_app.config['DEFAULT_PAGE_SIZE'], type=int)
    per_page = min(max(per_page, 1), current_app.config['MAX_PAGE_SIZE'])
    return page, per_page


@participation_bp.route('/competitions/<uuid:competition_id>/participate', methods=['POST'])
@jwt_required()
def participate(competition_id):
    """
    Enroll in a competition
    ---
    tags:
      - Participations
    security:
      - Bearer: []
    parameters:
      - in: path
        name: competition_id
        required: true
        type: string
    responses:
      201:
        description: Participation created, awaiting payment
      403:
        description: User is blocked
      404:
        description: Competition not found
      409:
        description: Already enrolled, or competition closed / full
    """
    participation = participation_service.enroll(current_identity(), competition_id)
    return jsonify({
        "success": True,
        "data": participation.to_dict(),
        "message": "Participation request created. Please complete payment."
    }), 201


@participation_bp.route('/<uuid:participation_id>/payment', methods=['POST'])
@jwt_required()
def submit_payment(participation_id):
    """
    Submit payment details for a participation
    ---
    tags:
      - Participations
    security:
      - Bearer: []
    parameters:
      - in: path
        name: participation_id
        required: true
        type: string
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - amount
            - payment_method
            - evidence_ref
          properties:
            amount:
              type: string
              description: Must equal the competition entry fee
            payment_method:
              type: string
            evidence_ref:
              type: string
              description: UTR or transaction id
            screenshot_url:
              type: string
    responses:
      200:
        description: Payment submitted, pending verification
      400:
        description: Invalid amount or missing evidence
      403:
        description: Not your participation
      404:
        description: Participation not found
      409:
        description: Participation is not awaiting payment
    """
    data = request.get_json(silent=True) or {}
    participation = payment_service.submit_payment(
        participation_id,
        data.get('amount'),
        data,
        current_identity(),
    )
    return jsonify({
        "success": True,
        "data": participation.to_dict(),
        "message": "Payment details submitted successfully"
    }), 200


@participation_bp.route('/my', methods=['GET'])
@jwt_required()
def list_my_participations():
    """
    List the caller's participations
    ---
    tags:
      - Participations
    security:
      - Bearer: []
    parameters:
      - name: page
        in: query
        type: integer
        default: 1
      - name: per_page
        in: query
        type: integer
        default: 10
      - name: status
        in: query
        type: string
    responses:
      200:
        description: Paginated participations
    """
    page, per_page = page_args()
    result = my_participations(current_identity(), page, per_page, request.args.get('status'))
    return jsonify({"success": True, **result}), 200


@participation_bp.route('/<uuid:participation_id>', methods=['GET'])
@jwt_required()
def get_participation(participation_id):
    """
    Get one participation with its payment history and payout
    ---
    tags:
      - Participations
    security:
      - Bearer: []
    parameters:
      - in: path
        name: participation_id
        required: true
        type: string
    responses:
      200:
        description: Participation details
      403:
        description: Access denied
      404:
        description: Participation not found
    """
    participation = participation_service.get(participation_id, current_identity())
    return jsonify({"success": True, "data": participation.to_dict(include_history=True)}), 200


@participation_bp.route('/<uuid:participation_id>/cancel', methods=['PUT'])
@jwt_required()
def cancel_participation(participation_id):
    """
    Withdraw a participation that has not been verified
    ---
    tags:
      - Participations
    security:
      - Bearer: []
    responses:
      200:
        description: Participation cancelled
      403:
        description: Not your participation
      409:
        description: Payment pending or already verified
    """
    participation = participation_service.cancel(participation_id, current_identity())
    return jsonify({
        "success": True,
        "data": participation.to_dict(),
        "message": "Participation cancelled"
    }), 200


@participation_bp.route('/admin/all', methods=['GET'])
@jwt_required()
def list_all_participations():
    """
    List all participations (admin)
    ---
    tags:
      - Participations Admin
    security:
      - Bearer: []
    parameters:
      - name: page
        in: query
        type: integer
      - name: per_page
        in: query
        type: integer
      - name: status
        in: query
        type: string
      - name: competition_id
        in: query
        type: string
      - name: month
        in: query
        type: integer
      - name: year
        in: query
        type: integer
    responses:
      200:
        description: Paginated participations
      403:
        description: Admin capability required
    """
    page, per_page = page_args()
    result = all_participations(
        current_identity(),
        page,
        per_page,
        status=request.args.get('status'),
        competition_id=request.args.get('competition_id'),
        month=request.args.get('month', type=int),
        year=request.args.get('year', type=int),
    )
    return jsonify({"success": True, **result}), 200


@participation_bp.route('/admin/<uuid:participation_id>/verify-payment', methods=['PUT'])
@jwt_required()
def verify_payment(participation_id):
    """
    Approve or reject a pending payment (admin)
    ---
    tags:
      - Participations Admin
    security:
      - Bearer: []
    parameters:
      - in: path
        name: participation_id
        required: true
        type: string
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - status
          properties:
            status:
              type: string
              enum: [APPROVED, REJECTED]
            admin_notes:
              type: string
    responses:
      200:
        description: Decision recorded; payout created on approval
      403:
        description: Admin capability required
      404:
        description: Participation not found
      409:
        description: Not pending verification, or no configuration in effect
    """
    data = request.get_json(silent=True) or {}
    participation = verification_service.verify(
        participation_id,
        data.get('status'),
        current_identity(),
        admin_notes=data.get('admin_notes'),
    )
    decision = str(data.get('status')).lower()
    return jsonify({
        "success": True,
        "data": participation.to_dict(include_history=True),
        "message": f"Participation {decision} successfully"
    }), 200
