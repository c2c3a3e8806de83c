from flask import Blueprint, jsonify, request, current_app
from tictactoe import get_gateway
from tictactoe.services.games.errors import GameError


games = Blueprint('games', __name__)


@games.errorhandler(GameError)
def handle_game_error(exc: GameError):
    if exc.status_code >= 500:
        current_app.logger.error(f"[api-error] {request.method} {request.path}: {exc.message}")
    return jsonify({'error': exc.message}), exc.status_code


@games.route('', methods=['POST'])
def create_game():
    game = get_gateway().create_game()
    return jsonify(game.to_dict()), 201


@games.route('/<string:game_code>/join', methods=['POST'])
def join_game(game_code):
    data = request.get_json(silent=True) or {}
    player_id = data.get('playerId')
    if not isinstance(player_id, str) or not player_id.strip():
        return jsonify({'error': 'playerId is required'}), 400
    game = get_gateway().join_game(game_code, player_id.strip())
    return jsonify(game.to_dict())


@games.route('/<string:game_code>', methods=['GET'])
def get_game(game_code):
    game = get_gateway().get_game(game_code)
    return jsonify(game.to_dict())


@games.route('/<string:game_code>/reset', methods=['POST'])
def reset_game(game_code):
    game = get_gateway().reset_game(game_code)
    return jsonify(game.to_dict())
