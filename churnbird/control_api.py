"""Control API for runtime management using FastAPI."""
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
import logging
import time

from churnbird.engine import TurnoverEngine
from churnbird.prom_exporter import PopulationCollector

logger = logging.getLogger(__name__)


class LogLevelRequest(BaseModel):
    """Request to change log level."""
    level: str


class ControlAPI:
    """FastAPI-based control API for runtime management."""

    def __init__(self, engine: TurnoverEngine, collector: PopulationCollector):
        """
        Initialize control API.

        Args:
            engine: Turnover engine owning the population
            collector: Scrape collector, for scrape statistics
        """
        self.engine = engine
        self.collector = collector
        self.population = engine.population
        self.start_time = time.time()
        self.app = FastAPI(title="churnbird Control API")

        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/healthz")
        def healthz():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": time.time()}

        @self.app.get("/status")
        def status():
            """Get current population and turnover status."""
            # Family sizes are fixed at startup; no lock needed
            return {
                "uptime_seconds": time.time() - self.start_time,
                "seed": self.population.identity.seed,
                "families": len(self.population.families),
                "total_series": self.population.total_series,
                "family_sizes": self.population.family_sizes(),
                "fixed_label": {
                    "name": self.population.fixed_label_name,
                    "cardinality": self.population.fixed_label_cardinality,
                },
                "turnover": {
                    "enabled": self.engine.config.enabled,
                    "rate": self.engine.config.rate,
                    "interval_s": self.engine.config.interval_s,
                    "cycles": self.engine.cycle_count,
                    "last_replaced": self.engine.last_replaced,
                },
                "scrapes": self.collector.scrape_count,
            }

        @self.app.post("/control/turnover")
        def trigger_turnover():
            """Run one turnover cycle now."""
            if not self.engine.config.enabled:
                raise HTTPException(
                    status_code=409,
                    detail="Series turnover is disabled (rate 0)"
                )

            logger.info("Triggering turnover cycle via control API")
            replaced = self.engine.cycle()
            return {
                "status": "turnover_completed",
                "replaced": replaced,
                "cycles": self.engine.cycle_count,
            }

        @self.app.post("/control/loglevel")
        def set_log_level(request: LogLevelRequest):
            """Change log level at runtime."""
            level = request.level.upper()

            if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid log level: {level}"
                )

            logging.getLogger().setLevel(getattr(logging, level))
            logger.info(f"Log level changed to: {level}")

            return {
                "status": "log_level_changed",
                "level": level,
                "timestamp": time.time()
            }

    def run(self, host: str = "0.0.0.0", port: int = 8081):
        """Run the API server."""
        import uvicorn
        uvicorn.run(self.app, host=host, port=port, log_level="info")
