# contract_signature/routes/sign.py
import io
import logging

from flask import Blueprint, current_app, jsonify, request, send_file
from werkzeug.utils import secure_filename

from ..errors import TemplateError, ValidationError
from ..schemas import ClientData, SubmissionRecord

logger = logging.getLogger(__name__)

sign_bp = Blueprint("sign", __name__)

RETRY_MESSAGE = "Une erreur est survenue lors de la soumission. Veuillez reessayer."


def _service():
    return current_app.extensions["contract_signature"]


def _client_ip():
    # ProxyFix (PROXY_FIX_X_FOR) a deja remplace remote_addr si un proxy de confiance est configure
    return request.remote_addr


@sign_bp.route("/", methods=["POST"])
def submit_signature():
    # reception du formulaire de signature
    data = request.get_json(silent=True)
    try:
        submission = SubmissionRecord.from_form(
            data, ip_address=_client_ip(), user_agent=request.headers.get("User-Agent"),
        )
    except ValidationError as e:
        logger.warning(f"Soumission refusee: {e}", extra={"route": request.path})
        return jsonify({"error": str(e), "fields": e.fields}), 400

    try:
        outcome = _service().submit(submission)
    except TemplateError as e:
        logger.error(f"Contrat impossible a generer: {e}", extra={"route": request.path})
        return jsonify({"error": RETRY_MESSAGE}), 500

    if not outcome.record.ok:
        return jsonify({"error": RETRY_MESSAGE, "details": str(outcome.record.error)}), 500
    if not outcome.dispatch.success:
        return jsonify({
            "error": RETRY_MESSAGE,
            "details": outcome.dispatch.first_error,
            "signatureId": outcome.record.signature_id,
            "outcomes": outcome.dispatch.to_list(),
        }), 500
    return jsonify({
        "success": True,
        "signatureId": outcome.record.signature_id,
        "outcomes": outcome.dispatch.to_list(),
    })


@sign_bp.route("/contract", methods=["GET"])
def contract_pdf():
    # le contrat vierge, affiche dans la visionneuse
    try:
        content = _service().template_source.read()
    except TemplateError as e:
        logger.error(str(e), extra={"route": request.path})
        return jsonify({"error": "Contrat introuvable"}), 404
    return send_file(io.BytesIO(content), mimetype="application/pdf", download_name="contrat.pdf")


@sign_bp.route("/preview", methods=["POST"])
def preview_contract():
    # contrat rempli avec les informations du client, en telechargement
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    try:
        client = ClientData.from_payload(data.get("clientData", data))
    except ValidationError as e:
        return jsonify({"error": str(e), "fields": e.fields}), 400
    try:
        content = _service().fill_contract(client)
    except TemplateError as e:
        logger.error(f"Apercu impossible: {e}", extra={"route": request.path})
        return jsonify({"error": RETRY_MESSAGE}), 500
    filename = secure_filename(f"Contrat_{client.last_name}_{client.first_name}.pdf")
    return send_file(io.BytesIO(content), mimetype="application/pdf", as_attachment=True,
                     download_name=filename)
