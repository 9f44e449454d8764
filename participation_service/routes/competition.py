from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from participation_service.auth import current_identity, require_admin
from participation_service.services import competition_service

competition_bp = Blueprint('competitions', __name__)


@competition_bp.route('/', methods=['GET'])
def list_competitions():
    """
    List competitions currently accepting entries
    ---
    tags:
      - Competitions
    responses:
      200:
        description: Open competitions, soonest first
    """
    competitions = competition_service.list_competitions()
    return jsonify({"success": True, "data": [c.to_dict() for c in competitions]}), 200


@competition_bp.route('/<uuid:competition_id>', methods=['GET'])
def get_competition(competition_id):
    """
    Get a competition
    ---
    tags:
      - Competitions
    parameters:
      - name: competition_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Competition details
      404:
        description: Competition not found
    """
    competition = competition_service.get_competition(competition_id)
    return jsonify({"success": True, "data": competition.to_dict()}), 200


@competition_bp.route('/admin/all', methods=['GET'])
@jwt_required()
def list_all_competitions():
    """
    List every competition, closed ones included (admin)
    ---
    tags:
      - Competitions Admin
    security:
      - Bearer: []
    responses:
      200:
        description: All competitions
      403:
        description: Admin capability required
    """
    require_admin(current_identity())
    competitions = competition_service.list_competitions(include_closed=True)
    return jsonify({"success": True, "data": [c.to_dict() for c in competitions]}), 200


@competition_bp.route('/admin', methods=['POST'])
@jwt_required()
def create_competition():
    """
    Create a competition (admin)
    ---
    tags:
      - Competitions Admin
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - title
            - address
            - entry_fee
            - event_date
          properties:
            title:
              type: string
            description:
              type: string
            address:
              type: string
            entry_fee:
              type: string
            event_date:
              type: string
              format: date-time
            closes_at:
              type: string
              format: date-time
            max_participants:
              type: integer
    responses:
      201:
        description: Competition created
      400:
        description: Invalid input
      403:
        description: Admin capability required
    """
    competition = competition_service.create_competition(request.get_json(silent=True), current_identity())
    return jsonify({"success": True, "data": competition.to_dict()}), 201


@competition_bp.route('/admin/<uuid:competition_id>', methods=['PUT'])
@jwt_required()
def update_competition(competition_id):
    """
    Update a competition (admin)
    Title, entry fee and date cannot change once participants exist.
    ---
    tags:
      - Competitions Admin
    security:
      - Bearer: []
    responses:
      200:
        description: Competition updated
      409:
        description: Change other than closing after enrollment, or reopen attempted
    """
    competition = competition_service.update_competition(
        competition_id, request.get_json(silent=True), current_identity()
    )
    return jsonify({"success": True, "data": competition.to_dict()}), 200


@competition_bp.route('/admin/<uuid:competition_id>/close', methods=['PUT'])
@jwt_required()
def close_competition(competition_id):
    """
    Close a competition's entry window (admin)
    ---
    tags:
      - Competitions Admin
    security:
      - Bearer: []
    responses:
      200:
        description: Competition closed
    """
    competition = competition_service.close_competition(competition_id, current_identity())
    return jsonify({"success": True, "data": competition.to_dict()}), 200
