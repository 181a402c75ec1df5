from flask import Blueprint, current_app
from flasgger import swag_from
from flask_jwt_extended import get_jwt

from ...exceptions import StorageError
from ...schemas.results import ResultsSchema
from ...services import factory
from ...utils.audit import safe_audit
from ...utils.rbac import operator_required

results_bp = Blueprint("results", __name__)
results_schema = ResultsSchema()


@results_bp.get("")
@operator_required
@swag_from({
    "tags": ["Results"],
    "summary": "Vote totals per target",
    "description": "Counts recorded submissions grouped by target, most votes first.",
    "security": [{"BearerAuth": []}],
    "responses": {
        200: {"description": "Results"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        500: {"description": "Server error"},
    }
})
def vote_totals():
    ledger = factory.submission_ledger()
    try:
        totals = ledger.totals_by_target()
    except StorageError:
        current_app.logger.exception("DB error fetching vote totals")
        return {"message": "Failed to fetch results"}, 500

    total_votes = sum(row["votes"] for row in totals)

    safe_audit(
        action="RESULTS_VIEWED",
        entity_type="RESULTS",
        details={"role": (get_jwt() or {}).get("role"), "total_votes": total_votes},
    )

    return results_schema.dump({"total_votes": total_votes, "results": totals}), 200
