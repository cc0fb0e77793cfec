# contract_signature/routes/api.py
import logging

from flask import Blueprint, current_app, jsonify, request

from ..encoding import decode_document
from ..errors import EncodingError, ValidationError
from ..schemas import ClientData

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@api_bp.route("/send-signature-email", methods=["POST"])
def send_signature_email():
    # envoi du pdf signe (base64) a l entreprise et au client
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    client_data = data.get("clientData")
    pdf_base64 = data.get("pdfBase64")
    if not client_data or not pdf_base64:
        return jsonify({"error": "Donnees requises manquantes"}), 400

    try:
        client = ClientData.from_payload(client_data)
        pdf_bytes = decode_document(pdf_base64)
    except (ValidationError, EncodingError) as e:
        logger.warning(f"Demande d envoi refusee: {e}", extra={"route": request.path})
        return jsonify({"error": str(e)}), 400

    dispatcher = current_app.extensions["contract_signature"].dispatcher
    result = dispatcher.dispatch(client, pdf_bytes)
    if not result.success:
        return jsonify({
            "error": "Echec de l envoi des courriels",
            "details": result.first_error,
            "outcomes": result.to_list(),
        }), 500
    return jsonify({"success": True, "message": "Courriels envoyes"})
