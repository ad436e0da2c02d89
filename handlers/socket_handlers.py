"""
Socket.IO Event Handlers for Party Hub.

Pure routing layer that delegates to the session hub.
Contains no business logic - only event routing and response formatting.
"""

import logging
from flask import request
from flask_socketio import emit

from utils.constants import EVENTS

logger = logging.getLogger(__name__)


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _reply(success: bool, message: str, **extra) -> dict:
    """
    Build an acknowledgement and report errors to the caller.

    Failures with an empty message were ignored by the hub and are not
    reported as errors.
    """
    if success:
        return {'success': True, **extra}
    if message:
        emit(EVENTS['ERROR'], {'message': message})
        return {'success': False, 'error': message}
    return {'success': False}


def register_socket_handlers(socketio, hub):
    """
    Register all Socket.IO event handlers.

    Args:
        socketio: SocketIO instance
        hub: Session hub instance
    """

    @socketio.on('connect')
    def handle_connect():
        """Handle client connection."""
        logger.info(f"Client connected: {request.sid}")
        emit('connected', {'message': 'Connected to server successfully'})

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        """Handle client disconnection."""
        logger.info(f"Client disconnected: {request.sid}")

        try:
            hub.disconnect(request.sid)
        except Exception as e:
            logger.error(f"Error handling disconnect: {e}", exc_info=True)

    @socketio.on('session:create')
    def handle_session_create(data=None):
        """Handle presenter creating a new session."""
        try:
            success, message, session = hub.create_session(request.sid)
            if success:
                emit(EVENTS['CATALOG'], hub.catalog())
                return _reply(True, message, session_code=session.code)
            return _reply(False, message)

        except Exception as e:
            logger.error(f"Error creating session: {e}", exc_info=True)
            return _reply(False, 'Failed to create session')

    @socketio.on('session:join')
    def handle_session_join(data=None):
        """Handle presenter reattaching to an existing session."""
        try:
            code = _payload(data).get('code')
            success, message, session = hub.resume_session(request.sid, code)
            if success:
                emit(EVENTS['CATALOG'], hub.catalog())
                return _reply(True, message, session_code=session.code)
            return _reply(False, message)

        except Exception as e:
            logger.error(f"Error joining session as presenter: {e}", exc_info=True)
            return _reply(False, 'Failed to join session')

    @socketio.on('participant:join')
    def handle_participant_join(data=None):
        """Handle a participant joining (or rejoining) a session."""
        try:
            payload = _payload(data)
            success, message, participant = hub.join_participant(
                request.sid,
                payload.get('code'),
                payload.get('name'),
                participant_id=payload.get('participant_id'),
                token=payload.get('token')
            )
            if not success:
                return _reply(False, message)

            emit(EVENTS['CATALOG'], hub.catalog())
            return _reply(
                True, message,
                participant_id=participant.id,
                token=participant.token,
                is_master=participant.is_master,
                is_active=participant.is_active
            )

        except Exception as e:
            logger.error(f"Error joining session: {e}", exc_info=True)
            return _reply(False, 'Failed to join session')

    @socketio.on('participant:rename')
    def handle_participant_rename(data=None):
        """Handle a participant changing their display name."""
        try:
            success, message, participant = hub.rename_participant(request.sid, _payload(data).get('name'))
            if success:
                return _reply(True, message, name=participant.name)
            return _reply(False, message)

        except Exception as e:
            logger.error(f"Error renaming participant: {e}", exc_info=True)
            return _reply(False, 'Failed to change name')

    @socketio.on('game:select')
    def handle_game_select(data=None):
        """Handle the master picking a game."""
        try:
            success, message, game_id = hub.select_game(request.sid, _payload(data).get('game_id'))
            return _reply(success, message, game_id=game_id)

        except Exception as e:
            logger.error(f"Error selecting game: {e}", exc_info=True)
            return _reply(False, 'Failed to select game')

    @socketio.on('game:start')
    def handle_game_start(data=None):
        """Handle the master starting the selected game."""
        try:
            success, message, _ = hub.start_game(request.sid)
            return _reply(success, message)

        except Exception as e:
            logger.error(f"Error starting game: {e}", exc_info=True)
            return _reply(False, 'Failed to start game')

    @socketio.on('game:end')
    def handle_game_end(data=None):
        """Handle the master ending the game."""
        try:
            success, message, _ = hub.end_game(request.sid)
            return _reply(success, message)

        except Exception as e:
            logger.error(f"Error ending game: {e}", exc_info=True)
            return _reply(False, 'Failed to end game')

    @socketio.on('game:action')
    def handle_game_action(data=None):
        """Forward a game action to the running game."""
        try:
            success, message, _ = hub.game_action(request.sid, data)
            return _reply(success, message)

        except Exception as e:
            logger.error(f"Error handling game action: {e}", exc_info=True)
            return _reply(False, 'Failed to apply action')

    @socketio.on('visibility:toggle')
    def handle_visibility_toggle(data=None):
        """Handle the master showing or hiding the join prompt."""
        try:
            visible = data if isinstance(data, bool) else _payload(data).get('visible')
            success, message, visible = hub.set_join_visible(request.sid, visible)
            return _reply(success, message, join_visible=visible)

        except Exception as e:
            logger.error(f"Error toggling join visibility: {e}", exc_info=True)
            return _reply(False, 'Failed to update join visibility')

    @socketio.on('catalog:list')
    def handle_catalog_list(data=None):
        """Send the game catalog to the caller."""
        catalog = hub.catalog()
        emit(EVENTS['CATALOG'], catalog)
        return {'success': True, 'games': catalog}

    logger.info("Socket.IO handlers registered")
