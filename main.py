from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
import logging

from crm_engine import CrmProcessor, CrmStore, NotFoundError, config
from crm_engine.store import create_store_from_env
from crm_engine.leads import filter_leads, filter_proposals, lead_stats
from crm_engine.models import BANKS, LEAD_STATUSES, ORIGENS, SITUACOES, parse_datetime, read_text

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(store: CrmStore | None = None) -> Flask:
    app = Flask(__name__)

    # Enable CORS for all routes (the browser UI is served from another origin)
    CORS(app)

    # Initialize the processor and the repository
    processor = CrmProcessor()
    store = store or create_store_from_env(config.DATABASE_URL)

    def current_user_id() -> str:
        return request.headers.get("X-User-Id") or config.DEFAULT_USER_ID

    def read_json() -> dict:
        data = request.get_json(force=True, silent=True)
        if not isinstance(data, dict) or not data:
            raise ValueError("No input data provided")
        return data

    @app.errorhandler(ValueError)
    def handle_validation_error(e):
        # Validation errors from engine
        logger.error(f"Validation error: {str(e)}")
        return jsonify({"error": str(e), "status": "validation_failed"}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        logger.error(f"Not found: {str(e)}")
        return jsonify({"error": str(e), "status": "not_found"}), 404

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description, "status": "failed"}), e.code
        # Unexpected errors - log details but return generic message
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({"error": "An unexpected error occurred", "status": "failed"}), 500

    @app.route("/api", methods=["GET"])
    def api_info():
        """API information endpoint"""
        return jsonify({
            "status": "ok",
            "message": "Debt Renegotiation CRM API",
            "version": "1.0",
            "environment": config.ENVIRONMENT,
            "endpoints": {
                "calculate": "/calculate [POST]",
                "payment_plan": "/payment_plan [POST]",
                "proposals": "/api/proposals?search=&status= [GET, POST], /api/proposals/<id> [GET, PATCH]",
                "commissions": "/api/commissions [GET]",
                "leads": "/api/leads [GET, POST], /api/leads/<id> [GET]",
                "reports": "/api/reports [GET]",
                "health": "/health [GET]"
            }
        }), 200

    @app.route("/health", methods=["GET"])
    def health():
        """Health check for monitoring"""
        return jsonify({"status": "healthy"}), 200

    # -------------------------------------------------------------------------
    # Calculator
    # -------------------------------------------------------------------------

    @app.route("/calculate", methods=["POST"])
    def calculate():
        """Run the fee calculator and the payment plans"""
        input_data = read_json()
        return jsonify(processor.process_from_dict(input_data)), 200

    @app.route("/payment_plan", methods=["POST"])
    def payment_plan():
        input_data = read_json()
        return jsonify(processor.payment_plan_from_dict(input_data)), 200

    # -------------------------------------------------------------------------
    # Proposals
    # -------------------------------------------------------------------------

    @app.route("/api/proposals", methods=["POST"])
    def create_proposal():
        input_data = read_json()
        client_name = input_data.get("clientName", "Unknown")
        logger.info(f"Saving proposal for: {client_name}")

        proposal = processor.build_proposal(input_data, current_user_id())
        saved = store.create_proposal(proposal)

        return jsonify(processor.output_builder.build_proposal(saved)), 201

    @app.route("/api/proposals", methods=["GET"])
    def list_proposals():
        proposals = filter_proposals(
            store.list_proposals(),
            search=request.args.get("search", ""),
            status=request.args.get("status", "all"),
        )
        return jsonify([processor.output_builder.build_proposal(p) for p in proposals]), 200

    @app.route("/api/proposals/<proposal_id>", methods=["GET"])
    def get_proposal(proposal_id):
        proposal = store.get_proposal(proposal_id)
        return jsonify(processor.output_builder.build_proposal(proposal)), 200

    @app.route("/api/proposals/<proposal_id>", methods=["PATCH"])
    def update_proposal(proposal_id):
        changes = read_json()
        processor.validator.validate_proposal_update(changes)
        updated = store.update_proposal(proposal_id, changes)
        return jsonify(processor.output_builder.build_proposal(updated)), 200

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    @app.route("/api/commissions", methods=["GET"])
    def commissions():
        report = processor.commission_report(
            store.list_proposals(),
            rate=request.args.get("rate"),
            year=request.args.get("year"),
            month=request.args.get("month"),
        )
        return jsonify(report), 200

    @app.route("/api/reports", methods=["GET"])
    def reports():
        report = processor.kpi_report(
            store.list_leads(),
            store.list_proposals(),
            period=request.args.get("period", 30),
        )
        return jsonify(report), 200

    # -------------------------------------------------------------------------
    # Leads
    # -------------------------------------------------------------------------

    @app.route("/api/leads", methods=["POST"])
    def create_lead():
        input_data = read_json()
        logger.info(f"Creating lead: {input_data.get('clientName', 'Unknown')}")

        lead = processor.build_lead(input_data)
        saved = store.create_lead(lead)

        return jsonify(processor.output_builder.build_lead(saved)), 201

    @app.route("/api/leads", methods=["GET"])
    def list_leads():
        leads = filter_leads(
            store.list_leads(),
            search=request.args.get("search", ""),
            status=request.args.get("status", "all"),
        )
        return jsonify([processor.output_builder.build_lead(lead) for lead in leads]), 200

    @app.route("/api/leads/stats", methods=["GET"])
    def leads_stats():
        stats = lead_stats(store.list_leads())
        return jsonify(processor.output_builder.build_lead_stats(stats)), 200

    @app.route("/api/leads/options", methods=["GET"])
    def lead_options():
        """Values for the intake form selects"""
        return jsonify({
            "banks": BANKS,
            "origens": ORIGENS,
            "situacoes": SITUACOES,
            "statuses": list(LEAD_STATUSES),
        }), 200

    @app.route("/api/leads/<lead_id>", methods=["GET"])
    def get_lead(lead_id):
        lead = store.get_lead(lead_id)
        return jsonify(processor.output_builder.build_lead(lead)), 200

    @app.route("/api/leads/<lead_id>/status", methods=["PATCH"])
    def update_lead_status(lead_id):
        input_data = read_json()
        status = input_data.get("status")
        processor.validator.validate_lead_status(status)

        lead = store.update_lead_status(lead_id, status, read_text(input_data, "note"))
        return jsonify(processor.output_builder.build_lead(lead)), 200

    @app.route("/api/leads/<lead_id>/meeting", methods=["POST"])
    def schedule_meeting(lead_id):
        input_data = read_json()
        raw_date = input_data.get("meetingDate")
        if not raw_date:
            raise ValueError("meetingDate is required")

        meeting_date = parse_datetime(raw_date)
        lead = store.schedule_meeting(lead_id, meeting_date)
        return jsonify(processor.output_builder.build_lead(lead)), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=config.PORT, debug=False)
