"""
FastAPI WebSocket Broadcast Chat Server
Single shared room with presence, typing indicators and in-memory history
"""

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import asyncio
import uvicorn

from chatroom import (
    EventRouter,
    WebSocketConnection,
    OutboundEvent,
    parse_client_frame,
    utc_timestamp,
    get_logger,
    log_security_event,
    log_websocket_event,
    log_system_event,
    HOST,
    PORT,
    CORS_ORIGINS,
    CORS_ALLOW_CREDENTIALS,
    CORS_ALLOW_METHODS,
    WS_PING_INTERVAL,
    WS_PING_TIMEOUT
)

logger = get_logger()


def create_app(router: EventRouter = None) -> FastAPI:
    """
    Build the application around one EventRouter

    Args:
        router: Router to serve; a fresh one is created when omitted

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        logger.info("Broadcast Chat Server starting up...")
        yield
        stats = await app.state.router.stats()
        logger.info(f"Broadcast Chat Server shutting down... {stats}")

    app = FastAPI(
        title="Broadcast Chat Server",
        description="Real-time single-room chat with presence and typing indicators",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.router = router or EventRouter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=CORS_ALLOW_CREDENTIALS,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Liveness endpoint"""
        return {
            "message": "Chat server is running",
            "status": "OK",
            "timestamp": utc_timestamp()
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        try:
            stats = await app.state.router.stats()
            return {
                "status": "healthy",
                "timestamp": utc_timestamp(),
                **stats
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise HTTPException(status_code=503, detail="Service unavailable")

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Main WebSocket endpoint: one receive loop per client"""
        router: EventRouter = app.state.router

        await websocket.accept()
        connection = WebSocketConnection(websocket)
        connection_id = connection.connection_id
        log_websocket_event("connection_accepted", connection_id, f"client_ip={connection.ip_address}")

        writer_task = asyncio.create_task(connection.run_writer())
        await router.connect(connection)

        try:
            while not connection.close_requested:
                try:
                    raw = await websocket.receive_text()
                except WebSocketDisconnect:
                    log_websocket_event("client_disconnected", connection_id)
                    break

                try:
                    is_valid, error_msg, event, data = parse_client_frame(raw)
                    if not is_valid:
                        connection.send(OutboundEvent.SYSTEM_ERROR.value, error_msg)
                        continue

                    await router.dispatch(connection, event, data)

                except Exception as e:
                    logger.error(f"Message loop error for {connection_id}: {e}")
                    log_security_event("message_loop_error", {
                        "connection": connection_id,
                        "error": str(e)
                    })
                    # Continue processing other messages
                    continue

        except Exception as e:
            logger.error(f"WebSocket error: {e}")
            log_security_event("websocket_error", {
                "client_ip": connection.ip_address,
                "error": str(e)
            })

        finally:
            await router.disconnect(connection)
            connection.stop()
            await writer_task
            log_websocket_event("cleanup_complete", connection_id)

    return app


app = create_app()


if __name__ == "__main__":
    log_system_event("startup", f"Starting Broadcast Chat Server on {HOST}:{PORT}")

    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=False,
        log_level="info",
        access_log=True,
        ws_ping_interval=WS_PING_INTERVAL,
        ws_ping_timeout=WS_PING_TIMEOUT,
    )
