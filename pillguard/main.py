import logging
import asyncio
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pillguard.core.clock import DeviceClock
from pillguard.core.config import settings
from pillguard.core.firebase import init_firebase, firebase_ready
from pillguard.core.storage import connect_store, close_store, check_store_health
from pillguard.db.medications import MedicationRepository
from pillguard.db.timezone_tracker import TimezoneTracker
from pillguard.routes import adherence, assistant, drugs, medications, reminders, schedule
from pillguard.services.monitor import monitor_due_medications


GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"
BOLD = "\033[1m"


logging.basicConfig(
    level=logging.INFO if settings.environment == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


_monitor_task = None


#------This Function handles the lifespan events---------
@asynccontextmanager
async def lifespan(app: FastAPI):
    global _monitor_task

    logger.info(f"Starting {settings.environment} environment")
    print(f"{BOLD}{BLUE}PillGuard Backend v1.0.0{RESET}")

    try:
        if init_firebase():
            print(f"{GREEN}[OK] Firebase initialized{RESET}")
        else:
            print(f"{YELLOW}[WARN] Firebase not configured, push notifications disabled{RESET}")
    except Exception as e:
        logger.error(f"Failed to initialize Firebase: {str(e)}")

    try:
        store = await connect_store()
        print(f"{GREEN}[OK] Store connected ({settings.storage_backend}){RESET}")
    except Exception as e:
        logger.error(f"Failed to connect to store: {str(e)}")
        raise

    clock = DeviceClock()
    if settings.seed_demo_data:
        await MedicationRepository(store).seed_initial_data(clock.zone)

    if await TimezoneTracker(store).check_and_update(clock.zone):
        logger.warning(
            f"Device timezone is now {clock.zone}; fixed-time schedules are shown converted from their origin zone"
        )

    _monitor_task = asyncio.create_task(monitor_due_medications(store, clock))
    print(f"{GREEN}[OK] Due-dose monitor started{RESET}")

    yield

    logger.info("Shutting down application...")
    print(f"{YELLOW}[SHUTDOWN] Stopping services...{RESET}")
    if _monitor_task:
        _monitor_task.cancel()
        try:
            await _monitor_task
        except asyncio.CancelledError:
            pass

    await close_store()
    print(f"{RED}[SHUTDOWN] Application shutdown complete{RESET}")


app = FastAPI(
    title="PillGuard API",
    description="Personal medication reminder backend",
    version="1.0.0",
    lifespan=lifespan,
)


#------This Function handles validation errors---------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.method} {request.url}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "errors": [
                {"loc": list(err.get("loc", [])), "msg": err.get("msg", "")}
                for err in exc.errors()
            ],
        },
    )


#------This Function handles value errors---------
@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning(f"Value error for {request.method} {request.url}: {str(exc)}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


#------This Function handles general exceptions---------
@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error for {request.method} {request.url}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error" if settings.environment == "production" else str(exc)},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(medications.router)
app.include_router(schedule.router)
app.include_router(adherence.router)
app.include_router(reminders.router)
app.include_router(drugs.router)
app.include_router(assistant.router)


#------This Function returns health status---------
@app.get("/health")
async def health():
    return {"status": "alive", "service": "pillguard-backend", "environment": settings.environment}


#------This Function returns detailed health status---------
@app.get("/health/detailed")
async def health_detailed():
    store_health = await check_store_health()
    firebase_health = {"status": "healthy" if firebase_ready() else "uninitialized"}

    health_score = 100
    if store_health.get("status") != "healthy":
        health_score -= 60
    if firebase_health["status"] != "healthy":
        health_score -= 20

    return {
        "status": "alive",
        "service": "pillguard-backend",
        "environment": settings.environment,
        "store": store_health,
        "firebase": firebase_health,
        "device_timezone": settings.device_timezone,
        "health_score": max(0, health_score),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pillguard.main:app",
        host=settings.server_host,
        port=settings.port,
        reload=settings.environment != "production",
    )
