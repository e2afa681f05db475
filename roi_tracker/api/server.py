from __future__ import annotations
from dataclasses import asdict
import logging

from flask import Flask, jsonify, request

from roi_tracker.api.orchestrator import RoiService
from roi_tracker.config.env import get_api_config, get_engine_config, get_store_config, parse_frequency_overrides
from roi_tracker.domain.parsing import indicator_to_dict, project_to_dict
from roi_tracker.reports.insight import DEFAULT_PROMPT, insight_variables, render_insight_prompt
from roi_tracker.store.base import NotFoundError
from roi_tracker.store.memory import InMemoryStore

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Configuration helpers (overridable via app.config in tests)


def _get_frequency_overrides():
    if 'FREQUENCY_MULTIPLIERS' in app.config:
        return parse_frequency_overrides(app.config.get('FREQUENCY_MULTIPLIERS'))
    return get_engine_config().frequency_overrides


def _get_retention_days() -> int:
    days = app.config.get('INDICATOR_RETENTION_DAYS')
    if days is None:
        return get_store_config().inactive_retention_days
    return int(days)


def get_service() -> RoiService:
    svc = app.extensions.get('roi_service')
    if svc is None:
        svc = RoiService(InMemoryStore(), _get_frequency_overrides(), _get_retention_days())
        app.extensions['roi_service'] = svc
    return svc


@app.errorhandler(NotFoundError)
def _not_found(e):
    return jsonify({'error': 'not_found'}), 404


@app.errorhandler(ValueError)
def _bad_request(e):
    return jsonify({'error': str(e)}), 400


def _payload() -> dict:
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        raise ValueError('JSON object body is required')
    return body


@app.get('/projects')
def list_projects():
    org = request.args.get('organization_id')
    return jsonify({'projects': [project_to_dict(p) for p in get_service().store.list_projects(org)]})


@app.post('/projects')
def post_project():
    body = _payload()
    if not body.get('name'):
        return jsonify({'error': 'name is required'}), 400
    body.setdefault('organization_id', get_api_config().default_organization_id)
    p = get_service().create_project(body)
    return jsonify(project_to_dict(p)), 201


@app.get('/projects/<pid>')
def get_project(pid: str):
    return jsonify(get_service().project_summary(pid))


@app.patch('/projects/<pid>')
def patch_project(pid: str):
    return jsonify(project_to_dict(get_service().update_project(pid, _payload())))


@app.delete('/projects/<pid>')
def delete_project(pid: str):
    get_service().delete_project(pid)
    return '', 204


@app.get('/projects/<pid>/indicators')
def list_indicators(pid: str):
    svc = get_service()
    if svc.store.get_project(pid) is None:
        raise NotFoundError(pid)
    return jsonify({'indicators': [indicator_to_dict(i) for i in svc.store.list_active_indicators(pid)]})


@app.post('/projects/<pid>/indicators')
def post_indicator(pid: str):
    body = _payload()
    if not body.get('improvement_type'):
        return jsonify({'error': 'improvement_type is required'}), 400
    ind = get_service().create_indicator(pid, body)
    return jsonify(indicator_to_dict(ind)), 201


@app.get('/indicators/<iid>')
def get_indicator(iid: str):
    ind = get_service().store.get_indicator(iid)
    if ind is None:
        raise NotFoundError(iid)
    return jsonify(indicator_to_dict(ind))


@app.patch('/indicators/<iid>')
def patch_indicator(iid: str):
    return jsonify(indicator_to_dict(get_service().update_indicator(iid, _payload())))


@app.delete('/indicators/<iid>')
def delete_indicator(iid: str):
    get_service().delete_indicator(iid)
    return '', 204


@app.get('/indicators/<iid>/stats')
def indicator_stats(iid: str):
    return jsonify(asdict(get_service().indicator_stats(iid)))


@app.get('/dashboard')
def dashboard():
    data = get_service().dashboard(request.args.get('organization_id'))
    return jsonify({
        'stats': asdict(data['stats']),
        'economy_history': [asdict(h) for h in data['economy_history']],
        'distribution_by_type': [asdict(d) for d in data['distribution_by_type']],
        'projects': data['projects'],
        'indicators': data['indicators'],
    })


@app.route('/dashboard/insight', methods=['GET', 'POST'])
def dashboard_insight():
    # POST may carry a custom {"template": "..."}; GET uses the default prompt
    template = None
    if request.method == 'POST':
        template = (request.get_json(force=True, silent=True) or {}).get('template')
    stats = get_service().dashboard(request.args.get('organization_id'))['stats']
    return jsonify({
        'variables': insight_variables(stats),
        'prompt': render_insight_prompt(stats, template or DEFAULT_PROMPT),
    })


@app.post('/maintenance/purge-indicators')
def purge_indicators():
    return jsonify(get_service().purge_inactive_indicators())


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app.run(host='0.0.0.0', port=8000)
