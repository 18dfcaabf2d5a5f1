from flask import Blueprint
from flask_jwt_extended import jwt_required, get_jwt_identity

from campuslib.services.stats_service import StatsService
from campuslib.utils.http import json_ok

chatbot_bp = Blueprint("chatbot", __name__)


@chatbot_bp.get("/context")
@jwt_required()
def context():
    return json_ok(StatsService.chatbot_context(int(get_jwt_identity())))
