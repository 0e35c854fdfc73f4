from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError
from . import db
from .models import SavedQuery

saved_queries_bp = Blueprint('saved_queries_bp', __name__)

# grid state keys a saved query may hold
SAVED_STATE_KEYS = ('f', 'order', 'order_direction')


@saved_queries_bp.route('/grid_saved_queries/<grid_name>', methods=['GET'])
def list_saved_queries(grid_name):
    return jsonify([saved_query.to_dict() for saved_query in SavedQuery.get_for_grid(grid_name)])


@saved_queries_bp.route('/grid_saved_queries/<grid_name>', methods=['POST'])
def create_saved_query(grid_name):
    """Saves the filter and order state of a grid under a name."""
    data = request.get_json(silent=True) or {}

    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Missing required field: name'}), 400

    state = data.get('query')
    if not isinstance(state, dict):
        return jsonify({'error': 'Missing required field: query'}), 400
    state = {key: value for key, value in state.items() if key in SAVED_STATE_KEYS}

    saved_query = SavedQuery(name=name, grid_name=grid_name, state=state)
    try:
        db.session.add(saved_query)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': f"A query named '{name}' already exists for this grid"}), 400

    current_app.logger.info(f"Grid '{grid_name}': saved query '{name}' created")
    return jsonify(saved_query.to_dict()), 201


@saved_queries_bp.route('/grid_saved_queries/<grid_name>/<int:query_id>', methods=['DELETE'])
def delete_saved_query(grid_name, query_id):
    saved_query = SavedQuery.query.filter_by(id=query_id, grid_name=grid_name).first()
    if not saved_query:
        return jsonify({'error': 'Saved query not found'}), 404

    db.session.delete(saved_query)
    db.session.commit()
    current_app.logger.info(f"Grid '{grid_name}': saved query '{saved_query.name}' deleted")
    return jsonify({'message': 'Saved query deleted successfully'})
