"""
API Route Handlers for Party Hub.

Pure routing layer that delegates to the session hub.
Contains no business logic - only request/response handling.
"""

import logging
from flask import jsonify

logger = logging.getLogger(__name__)


def register_api_handlers(app, hub, ai_services=None):
    """
    Register all API route handlers.

    Args:
        app: Flask application instance
        hub: Session hub instance
        ai_services: AI service bundle, reported in the health check
    """

    @app.route('/api/health')
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'message': 'Party Hub server is running',
            'version': '1.0.0',
            'ai_available': bool(ai_services and ai_services.get_status().get('available'))
        })

    @app.route('/api/games')
    def list_games():
        """Game catalog endpoint."""
        return jsonify({'games': hub.catalog()})

    @app.route('/api/stats')
    def get_stats():
        """Session and connection statistics."""
        try:
            return jsonify(hub.get_status())
        except Exception as e:
            logger.error(f"Error getting statistics: {e}")
            return jsonify({'error': 'Failed to get statistics'}), 500

    @app.route('/api/sessions/<code>')
    def get_session(code):
        """Check whether a session exists before joining it."""
        snapshot = hub.get_snapshot(code)
        if snapshot is None:
            return jsonify({'exists': False, 'error': 'Session not found'}), 404

        return jsonify({
            'exists': True,
            'code': snapshot['id'],
            'status': snapshot['status'],
            'join_visible': snapshot['join_visible'],
            'selected_game_id': snapshot['selected_game_id'],
            'participant_count': len(snapshot['participants'])
        })

    @app.route('/api/sessions/cleanup', methods=['POST'])
    def cleanup_sessions():
        """Remove sessions left unattended past the grace window."""
        try:
            removed = hub.sweep()
            return jsonify({'removed': removed})
        except Exception as e:
            logger.error(f"Error cleaning up sessions: {e}")
            return jsonify({'error': 'Failed to clean up sessions'}), 500

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal server error'}), 500
