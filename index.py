# index.py
from flask import Blueprint, jsonify
from datetime import datetime

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def home():
    return jsonify({"status": "ok", "service": "printshop", "time": datetime.utcnow().isoformat()})
