"""
FastAPI Application - REST API for Collapsi clients.

Endpoints:
    GET    /api/v1/health                              Health check
    POST   /api/v1/games                               Start a game
    GET    /api/v1/games                               List live games
    POST   /api/v1/games/import                        Start a game from a snapshot
    GET    /api/v1/games/{id}                          Get game state
    DELETE /api/v1/games/{id}                          End game
    GET    /api/v1/games/{id}/legal-moves              Enumerate legal paths
    POST   /api/v1/games/{id}/moves                    Submit a complete move
    POST   /api/v1/games/{id}/joker/start              Begin a joker move
    POST   /api/v1/games/{id}/joker/step               Take one joker step
    POST   /api/v1/games/{id}/joker/complete           End a joker move
    POST   /api/v1/games/{id}/joker/cancel             Abandon a joker move
    GET    /api/v1/games/{id}/snapshot                 Export a snapshot

All responses are JSON with explicit Pydantic schemas. Rule violations
come back as ErrorResponse with the engine's error code.
"""

from typing import Annotated, Any, Optional, Union
import logging
import os

from fastapi import Body, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .service import APIService
from .schemas import (
    CreateGameRequest,
    EndGameResponse,
    ErrorResponse,
    GameListResponse,
    GameStateResponse,
    HealthResponse,
    JokerStepRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    PlayerActionRequest,
    ServiceErrorCode,
    SnapshotResponse,
)

# Environment configuration
COLLAPSI_ENV = os.getenv("COLLAPSI_ENV", "development")
COLLAPSI_LOG_LEVEL = os.getenv("COLLAPSI_LOG_LEVEL", "INFO")
COLLAPSI_SESSION_TTL = int(os.getenv("COLLAPSI_SESSION_TTL", "3600"))
COLLAPSI_IDLE_TTL = int(os.getenv("COLLAPSI_IDLE_TTL", "86400"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# Engine codes that mean "valid request, wrong moment"
CONFLICT_CODES = {"GAME_OVER", "NOT_YOUR_TURN", "JOKER_MOVE_IN_PROGRESS"}


def configure_logging(level: str = COLLAPSI_LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def status_for(error_code: str) -> int:
    """HTTP status for an error code."""
    if error_code == ServiceErrorCode.SESSION_NOT_FOUND.value:
        return 404
    if error_code in CONFLICT_CODES:
        return 409
    return 400


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Collapsi API",
        description="""
Two-player Collapsi on a 4x4 wrap-around board.

## Moves

A numbered card moves you exactly that many orthogonal steps; a joker
moves you 1 to 4. The card you leave collapses. Joker moves can also be
played one step at a time through the `/joker/*` endpoints.

## Error Codes

| Code | Description |
|------|-------------|
| `DISTANCE_MISMATCH` | Path length does not match the card |
| `NON_ORTHOGONAL_STEP` | Two consecutive cells are not neighbors |
| `REVISITED_CELL` | A cell appears twice in the path |
| `ENDS_ON_COLLAPSED_CELL` | Path ends on a collapsed card |
| `ENDS_ON_OCCUPIED_CELL` | Path ends on the opponent |
| `NOT_YOUR_TURN` | Another player is to move |
| `GAME_OVER` | The game has ended |
| `CORRUPTED_SNAPSHOT` | Imported snapshot is unusable |
| `SESSION_NOT_FOUND` | Game does not exist |
| `VALIDATION_ERROR` | Request body could not be parsed |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Wrap a service error with the matching status code."""
        return JSONResponse(
            status_code=status_for(error.error_code),
            content=error.model_dump(),
        )

    def respond(result):
        if isinstance(result, ErrorResponse):
            return make_error_response(result)
        return result

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request bodies get the standard error shape."""
        errors = exc.errors()
        return make_error_response(ErrorResponse(
            error=f"Invalid request: {len(errors)} errors",
            error_code=ServiceErrorCode.VALIDATION_ERROR.value,
            details={"errors": [
                {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
                for err in errors
            ]},
        ))

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid deck or layout"}},
        tags=["Games"],
        summary="Start a new game",
    )
    async def create_game(body: CreateGameRequest) -> Union[GameStateResponse, JSONResponse]:
        """
        Start a new game.

        With no arguments the deck is shuffled at random. Pass `seed` for a
        reproducible shuffle, or `layout`/`deck` for a fixed board.
        """
        return respond(api_service.create_game(body))

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List live games",
    )
    async def list_games() -> GameListResponse:
        """
        List live games.

        Finished games past the session TTL, and unfinished games idle past
        the idle TTL, are dropped first.
        """
        api_service.cleanup(COLLAPSI_SESSION_TTL, COLLAPSI_IDLE_TTL)
        return api_service.list_games()

    @app.post(
        "/api/v1/games/import",
        response_model=GameStateResponse,
        responses={400: {"model": ErrorResponse, "description": "Corrupted snapshot"}},
        tags=["Games"],
        summary="Start a game from a snapshot",
    )
    async def import_game(
        snapshot: Annotated[dict[str, Any], Body(description="Snapshot from GET /snapshot")],
    ) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.import_game(snapshot))

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    async def get_game(game_id: str) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.get_game(game_id))

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="End a game",
    )
    async def end_game(
        game_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndGameResponse:
        """End a game and release its session."""
        return api_service.end_game(game_id, reason)

    @app.get(
        "/api/v1/games/{game_id}/snapshot",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Export a snapshot",
    )
    async def export_game(game_id: str) -> Union[SnapshotResponse, JSONResponse]:
        return respond(api_service.export_game(game_id))

    # =========================================================================
    # Move Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/games/{game_id}/legal-moves",
        response_model=LegalMovesResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Moves"],
        summary="Enumerate legal paths",
    )
    async def legal_moves(
        game_id: str,
        player_id: Annotated[Optional[str], Query(description="Defaults to the player to move")] = None,
    ) -> Union[LegalMovesResponse, JSONResponse]:
        return respond(api_service.legal_moves(game_id, player_id))

    @app.post(
        "/api/v1/games/{game_id}/moves",
        response_model=MoveResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Illegal move"},
            404: {"model": ErrorResponse, "description": "Game not found"},
            409: {"model": ErrorResponse, "description": "Not your turn or game over"},
        },
        tags=["Moves"],
        summary="Submit a complete move",
    )
    async def submit_move(game_id: str, body: MoveRequest) -> Union[MoveResponse, JSONResponse]:
        """
        Submit a complete move.

        **Request Body:**
        ```json
        {
            "player_id": "red",
            "from": {"row": 0, "col": 0},
            "to": {"row": 0, "col": 2},
            "path": [{"row": 0, "col": 0}, {"row": 0, "col": 1}, {"row": 0, "col": 2}],
            "cardLabel": "2"
        }
        ```
        """
        return respond(api_service.submit_move(game_id, body))

    @app.post(
        "/api/v1/games/{game_id}/joker/start",
        response_model=MoveResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Joker"],
        summary="Begin a joker move",
    )
    async def joker_start(game_id: str, body: PlayerActionRequest) -> Union[MoveResponse, JSONResponse]:
        return respond(api_service.joker_start(game_id, body))

    @app.post(
        "/api/v1/games/{game_id}/joker/step",
        response_model=MoveResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Joker"],
        summary="Take one joker step",
    )
    async def joker_step(game_id: str, body: JokerStepRequest) -> Union[MoveResponse, JSONResponse]:
        return respond(api_service.joker_step(game_id, body))

    @app.post(
        "/api/v1/games/{game_id}/joker/complete",
        response_model=MoveResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Joker"],
        summary="End a joker move",
    )
    async def joker_complete(game_id: str, body: PlayerActionRequest) -> Union[MoveResponse, JSONResponse]:
        """Commit the joker path as a move. Requires at least one step."""
        return respond(api_service.joker_complete(game_id, body))

    @app.post(
        "/api/v1/games/{game_id}/joker/cancel",
        response_model=MoveResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Joker"],
        summary="Abandon a joker move",
    )
    async def joker_cancel(game_id: str, body: PlayerActionRequest) -> Union[MoveResponse, JSONResponse]:
        return respond(api_service.joker_cancel(game_id, body))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="collapsi",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Collapsi API",
            "version": __version__,
            "environment": COLLAPSI_ENV,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn collapsi.api.app:app
app = create_app()
