from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from participation_service.auth import current_identity, require_admin
from participation_service.errors import ValidationError
from participation_service.services import config_service, reporting_service
from participation_service.utils.dates import parse_timestamp

admin_bp = Blueprint('admin', __name__)


def timestamp_arg(name):
    try:
        return parse_timestamp(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 timestamp")


# --- Sponsor bonus ---------------------------------------------------------

@admin_bp.route('/sponsor-bonus', methods=['GET'])
@jwt_required()
def get_sponsor_bonus():
    """
    Current sponsor bonus percentage
    ---
    tags:
      - Admin Config
    security:
      - Bearer: []
    responses:
      200:
        description: Effective sponsor bonus percentage and version
      409:
        description: No configuration seeded
    """
    require_admin(current_identity())
    config = config_service.get_effective_config()
    return jsonify({
        "success": True,
        "data": {"sponsor_bonus_pct": str(config.sponsor_bonus_pct), "version": config.version}
    }), 200


@admin_bp.route('/sponsor-bonus', methods=['PUT'])
@jwt_required()
def update_sponsor_bonus():
    """
    Set the sponsor bonus percentage (new version, effective now)
    ---
    tags:
      - Admin Config
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - percentage
          properties:
            percentage:
              type: number
    responses:
      200:
        description: New configuration version
      400:
        description: Percentage out of range
    """
    data = request.get_json(silent=True) or {}
    config = config_service.set_sponsor_bonus(data.get('percentage'), current_identity())
    return jsonify({
        "success": True,
        "data": config.to_dict(),
        "message": "Sponsor bonus percentage updated successfully"
    }), 200


# --- TDS -------------------------------------------------------------------

@admin_bp.route('/tds', methods=['GET'])
@jwt_required()
def get_tds():
    """
    Current TDS percentage
    ---
    tags:
      - Admin Config
    security:
      - Bearer: []
    responses:
      200:
        description: Effective TDS percentage and version
      409:
        description: No configuration seeded
    """
    require_admin(current_identity())
    config = config_service.get_effective_config()
    return jsonify({
        "success": True,
        "data": {"tds_pct": str(config.tds_pct), "version": config.version}
    }), 200


@admin_bp.route('/tds', methods=['PUT'])
@jwt_required()
def update_tds():
    """
    Set the TDS percentage (new version, effective now)
    ---
    tags:
      - Admin Config
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - percentage
          properties:
            percentage:
              type: number
    responses:
      200:
        description: New configuration version
      400:
        description: Percentage out of range
    """
    data = request.get_json(silent=True) or {}
    config = config_service.set_tds(data.get('percentage'), current_identity())
    return jsonify({
        "success": True,
        "data": config.to_dict(),
        "message": "TDS percentage updated successfully"
    }), 200


# --- Versioned configuration -----------------------------------------------

@admin_bp.route('/config', methods=['GET'])
@jwt_required()
def list_config_versions():
    """
    All configuration versions, oldest first
    ---
    tags:
      - Admin Config
    security:
      - Bearer: []
    responses:
      200:
        description: Configuration history
    """
    require_admin(current_identity())
    versions = config_service.list_versions()
    return jsonify({"success": True, "data": [v.to_dict() for v in versions]}), 200


@admin_bp.route('/config', methods=['POST'])
@jwt_required()
def create_config_version():
    """
    Append a configuration version
    ---
    tags:
      - Admin Config
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - sponsor_bonus_pct
            - tds_pct
          properties:
            sponsor_bonus_pct:
              type: number
            tds_pct:
              type: number
            effective_from:
              type: string
              format: date-time
    responses:
      201:
        description: Version created
      400:
        description: Percentages out of range
      409:
        description: effective_from not after the latest version
    """
    data = request.get_json(silent=True) or {}
    config = config_service.set_config(
        data.get('sponsor_bonus_pct'),
        data.get('tds_pct'),
        data.get('effective_from'),
        current_identity(),
    )
    return jsonify({"success": True, "data": config.to_dict()}), 201


@admin_bp.route('/config/effective', methods=['GET'])
@jwt_required()
def get_effective_config():
    """
    Configuration in effect at a point in time
    ---
    tags:
      - Admin Config
    security:
      - Bearer: []
    parameters:
      - name: at
        in: query
        type: string
        format: date-time
    responses:
      200:
        description: Effective version
      409:
        description: No version effective at that time
    """
    require_admin(current_identity())
    config = config_service.get_effective_config(timestamp_arg('at'))
    return jsonify({"success": True, "data": config.to_dict()}), 200


# --- Statistics ------------------------------------------------------------

@admin_bp.route('/income-stats', methods=['GET'])
@jwt_required()
def income_stats():
    """
    Payout totals per user
    ---
    tags:
      - Admin Stats
    security:
      - Bearer: []
    parameters:
      - name: start
        in: query
        type: string
        format: date-time
      - name: end
        in: query
        type: string
        format: date-time
      - name: user_id
        in: query
        type: string
    responses:
      200:
        description: Per-user gross, bonus, TDS and net totals
    """
    result = reporting_service.income_stats(
        current_identity(),
        start=timestamp_arg('start'),
        end=timestamp_arg('end'),
        user_id=request.args.get('user_id'),
    )
    return jsonify({"success": True, "data": result}), 200


@admin_bp.route('/bv-stats', methods=['GET'])
@jwt_required()
def bv_stats():
    """
    Participation volume grouped by competition or status
    ---
    tags:
      - Admin Stats
    security:
      - Bearer: []
    parameters:
      - name: group_by
        in: query
        type: string
        enum: [competition, status]
        default: competition
    responses:
      200:
        description: Counts and verified volume per group
    """
    result = reporting_service.bv_stats(
        current_identity(), group_by=request.args.get('group_by', 'competition')
    )
    return jsonify({"success": True, "data": result}), 200
