"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Serializes access to each game with its session lock
4. Formats responses

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import logging
import uuid

from .schemas import (
    CellInfo,
    CreateGameRequest,
    EndGameResponse,
    ErrorResponse,
    GameListResponse,
    GameStatisticsInfo,
    GameStateResponse,
    JokerInfo,
    JokerStepRequest,
    LegalMovesResponse,
    MoveRecordInfo,
    MoveRequest,
    MoveResponse,
    PlayerActionRequest,
    PlayerInfo,
    PositionInfo,
    ServiceErrorCode,
    SessionStatus,
    SnapshotResponse,
)
from ..engine_core.action import ActionResult
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.controller import TurnController
from ..engine_core.joker import can_complete, joker_phase, valid_joker_steps
from ..engine_core.state import GameState, MoveRecord, Position
from ..engine_core.statistics import game_statistics
from ..session import SessionExistsError, SessionManager


logger = logging.getLogger(__name__)


def _position_info(pos: Position) -> PositionInfo:
    return PositionInfo(row=pos.row, col=pos.col)


def _position(info: PositionInfo) -> Position:
    return Position(info.row, info.col)


def _record_info(record: MoveRecord) -> MoveRecordInfo:
    return MoveRecordInfo(
        player_id=record.player_id,
        from_position=_position_info(record.from_position),
        to_position=_position_info(record.to_position),
        path=[_position_info(p) for p in record.path],
        distance=record.distance,
        card_label=record.card_label.value,
        timestamp=record.timestamp,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        game = service.create_game(CreateGameRequest(seed=7))
        result = service.submit_move(game.game_id, MoveRequest(...))
        if isinstance(result, ErrorResponse):
            print(result.error_code)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    generator: ActionGenerator = field(default_factory=ActionGenerator)

    # =========================================================================
    # Game lifecycle
    # =========================================================================

    def create_game(self, request: CreateGameRequest) -> GameStateResponse | ErrorResponse:
        created = TurnController.new(
            random_seed=request.seed,
            deck=request.deck,
            layout=request.layout,
        )
        if not created.success:
            return ErrorResponse(error=created.error, error_code=created.error_code.value)

        session = self.session_manager.create_session(created.value)
        return self._state_response(session.controller.state)

    def import_game(self, snapshot: Any) -> GameStateResponse | ErrorResponse:
        """
        Start a session from a snapshot. Corrupted input is rejected.

        The game keeps the snapshot's id unless a live session already has
        it, in which case the import gets a new id and the live game is
        left alone.
        """
        restored = TurnController.restore(snapshot)
        if not restored.success:
            logger.warning("Rejected snapshot import: %s", restored.error)
            return ErrorResponse(error=restored.error, error_code=restored.error_code.value)

        metadata = {"imported": True, "source_game_id": restored.value.game_id}
        try:
            session = self.session_manager.create_session(restored.value, metadata=metadata)
        except SessionExistsError:
            fresh_id = str(uuid.uuid4())
            logger.info("Game %s is live; importing its snapshot as %s", restored.value.game_id, fresh_id)
            controller = TurnController.restore(snapshot, game_id=fresh_id).value
            session = self.session_manager.create_session(controller, metadata=metadata)
        return self._state_response(session.controller.state)

    def get_game(self, game_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)
        with session.lock:
            return self._state_response(session.controller.state)

    def export_game(self, game_id: str) -> SnapshotResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)
        with session.lock:
            return SnapshotResponse(
                game_id=game_id,
                snapshot=session.controller.snapshot(),
                statistics=GameStatisticsInfo.model_validate(session.controller.statistics().to_dict()),
            )

    def list_games(self) -> GameListResponse:
        games = self.session_manager.list_sessions()
        return GameListResponse(games=games, count=len(games))

    def end_game(self, game_id: str, reason: str = "user_ended") -> EndGameResponse:
        success = self.session_manager.end_session(game_id, reason)
        return EndGameResponse(success=success, game_id=game_id)

    def cleanup(self, max_age_seconds: int, max_idle_seconds: int | None = None) -> list[str]:
        return self.session_manager.cleanup_stale_sessions(max_age_seconds, max_idle_seconds)

    # =========================================================================
    # Moves
    # =========================================================================

    def submit_move(self, game_id: str, request: MoveRequest) -> MoveResponse | ErrorResponse:
        return self._run(
            game_id,
            lambda c: c.move(
                request.player_id,
                [_position(p) for p in request.path],
                request.card_label,
                from_position=_position(request.from_position),
                to_position=_position(request.to),
            ),
        )

    def joker_start(self, game_id: str, request: PlayerActionRequest) -> MoveResponse | ErrorResponse:
        return self._run(game_id, lambda c: c.start_joker(request.player_id))

    def joker_step(self, game_id: str, request: JokerStepRequest) -> MoveResponse | ErrorResponse:
        return self._run(game_id, lambda c: c.step_joker(request.player_id, _position(request.target)))

    def joker_complete(self, game_id: str, request: PlayerActionRequest) -> MoveResponse | ErrorResponse:
        return self._run(game_id, lambda c: c.complete_joker(request.player_id))

    def joker_cancel(self, game_id: str, request: PlayerActionRequest) -> MoveResponse | ErrorResponse:
        return self._run(game_id, lambda c: c.cancel_joker(request.player_id))

    def legal_moves(self, game_id: str, player_id: str | None = None) -> LegalMovesResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)

        with session.lock:
            state = session.controller.state
        pid = player_id or state.current_player.player_id
        if state.get_player(pid) is None:
            return ErrorResponse(error=f"Player {pid} not found", error_code="UNKNOWN_PLAYER")

        paths = self.generator.enumerate_paths(state, pid)
        destinations = self.generator.destinations(state, pid)
        return LegalMovesResponse(
            game_id=game_id,
            player_id=pid,
            paths=[[_position_info(p) for p in path] for path in paths],
            destinations=[_position_info(p) for p in destinations],
            count=len(paths),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _run(
        self,
        game_id: str,
        operation: Callable[[TurnController], ActionResult],
    ) -> MoveResponse | ErrorResponse:
        """Run one controller operation under the game's lock."""
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)

        with session.lock:
            result = operation(session.controller)
            session.touch()
            session.refresh_state()
            if not result.success:
                return ErrorResponse(
                    error=result.error,
                    error_code=result.error_code.value if result.error_code else "INVALID_ACTION",
                )
            state = session.controller.state

        return MoveResponse(
            game=self._state_response(state),
            move=_record_info(result.move_record) if result.move_record else None,
            changes=result.state_changes,
            game_over=result.game_over,
            winner=result.winner,
        )

    def _not_found(self, game_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Game not found: {game_id}",
            error_code=ServiceErrorCode.SESSION_NOT_FOUND.value,
        )

    def _state_response(self, state: GameState) -> GameStateResponse:
        board = [
            [
                CellInfo(
                    row=r,
                    col=c,
                    label=cell.label.value,
                    collapsed=cell.collapsed,
                    occupant_id=cell.occupant_id,
                )
                for c, cell in enumerate(row)
            ]
            for r, row in enumerate(state.board.cells)
        ]

        current_id = state.current_player.player_id if state.players else None
        players = [
            PlayerInfo(
                player_id=p.player_id,
                color=p.color.value,
                starting_card=p.starting_card.value,
                position=_position_info(p.position) if p.position else None,
                active=p.active,
                is_current_turn=(p.player_id == current_id and not state.is_over),
            )
            for p in state.players
        ]

        joker = None
        if state.joker_state is not None and state.joker_state.active:
            js = state.joker_state
            joker = JokerInfo(
                player_id=js.player_id,
                starting_position=_position_info(js.starting_position),
                current_position=_position_info(js.current_position),
                path=[_position_info(p) for p in js.path],
                remaining_distance=js.remaining_distance,
                spaces_moved=js.spaces_moved,
                phase=joker_phase(js, state.board, state.players).value,
                can_complete=can_complete(js),
                valid_steps=[
                    _position_info(p) for p in valid_joker_steps(js, state.board, state.players)
                ],
            )

        destinations = []
        if not state.is_over and current_id:
            destinations = [_position_info(p) for p in self.generator.destinations(state, current_id)]

        return GameStateResponse(
            game_id=state.game_id,
            status=SessionStatus.GAME_OVER if state.is_over else SessionStatus.ACTIVE,
            phase=state.phase.value,
            board=board,
            players=players,
            current_player_id=None if state.is_over else current_id,
            move_history=[_record_info(r) for r in state.move_history],
            joker=joker,
            winner=state.winner,
            legal_destinations=destinations,
            statistics=GameStatisticsInfo.model_validate(game_statistics(state).to_dict()),
        )
