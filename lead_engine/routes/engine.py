"""
Engine routes — batch triggers (scoring, forecasting) + read-only results API.

Triggers enqueue an RQ job and return 202 immediately; the batch itself runs
on a worker. Results are whatever the last completed run persisted.
"""
from flask import Blueprint, request, jsonify

from lead_engine.pipeline.manager import launch_scoring, launch_forecast, get_job_status
from lead_engine.services.db import get_lead_score, get_lead_prediction, list_pipeline_forecasts

bp = Blueprint('engine', __name__)


@bp.route('/health')
def health():
    return jsonify({'status': 'ok'})


# ── Batch triggers ───────────────────────────────────────────────────────────

@bp.route('/api/scores', methods=['POST'])
def trigger_scoring():
    """Score the given lead ids, or every active lead when none are given."""
    data = request.get_json(silent=True) or {}
    lead_ids = data.get('lead_ids')

    if lead_ids is not None:
        if not isinstance(lead_ids, list) or not all(isinstance(i, str) and i for i in lead_ids):
            return jsonify({'error': 'lead_ids must be a list of non-empty strings'}), 400

    try:
        job = launch_scoring(lead_ids)
    except Exception as e:
        return jsonify({'error': str(e)}), 500
    return jsonify({'job_id': job.id, 'lead_ids': lead_ids}), 202


@bp.route('/api/forecasts', methods=['POST'])
def trigger_forecast():
    """Generate forecasts for all active leads."""
    try:
        job = launch_forecast()
    except Exception as e:
        return jsonify({'error': str(e)}), 500
    return jsonify({'job_id': job.id}), 202


@bp.route('/api/jobs/<job_id>')
def job_status(job_id):
    try:
        status = get_job_status(job_id)
    except Exception as e:
        return jsonify({'error': str(e)}), 500
    if not status:
        return jsonify({'error': 'Job not found'}), 404
    return jsonify(status)


# ── Results ──────────────────────────────────────────────────────────────────

@bp.route('/api/forecasts')
def forecasts():
    """Recent pipeline forecast snapshots, newest first."""
    limit = request.args.get('limit', 20, type=int)
    limit = max(1, min(limit, 200))
    try:
        rows = list_pipeline_forecasts(limit=limit)
    except Exception as e:
        return jsonify({'error': str(e)}), 500
    return jsonify(rows)


@bp.route('/api/leads/<lead_id>/score')
def lead_score(lead_id):
    try:
        row = get_lead_score(lead_id)
    except Exception as e:
        return jsonify({'error': str(e)}), 500
    if not row:
        return jsonify({'error': 'Score not found'}), 404
    return jsonify(row)


@bp.route('/api/leads/<lead_id>/prediction')
def lead_prediction(lead_id):
    try:
        row = get_lead_prediction(lead_id)
    except Exception as e:
        return jsonify({'error': str(e)}), 500
    if not row:
        return jsonify({'error': 'Prediction not found'}), 404
    return jsonify(row)
