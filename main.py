import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from engines.bootstrap import Engines
from engines.config import EnginesSettings, get_settings
from engines.context import LoadContext
from engines.host import PluginInitializer
from engines.migrator import Migrator
from engines.routes import router as plugins_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def boot_plugins(settings: EnginesSettings, ctx: LoadContext | None = None) -> Engines:
    """Run the whole plugin startup sequence and return the bootstrapper."""
    engines = Engines(settings, ctx or LoadContext.for_process(settings))
    initializer = PluginInitializer(settings)
    engines.init(initializer)
    initializer.load_plugins(engines)
    engines.after_initialize()
    if engines.failures:
        logger.warning("Plugins that failed to load: %s", ", ".join(engines.failures))
    return engines


def create_app(settings: EnginesSettings | None = None, ctx: LoadContext | None = None) -> FastAPI:
    """Create the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Loading plugins...")
        app.state.engines = boot_plugins(settings, ctx)
        app.state.migrator = Migrator.from_settings(settings)
        logger.info("Plugins loaded: %s", ", ".join(app.state.engines.plugins.names()))
        yield
        logger.info("Shutting down the application...")

    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    app.include_router(plugins_router, prefix="/plugins")

    # Mirrored plugin assets, e.g. /plugin_assets/<plugin>/style.css
    app.mount(
        f"/{settings.public_directory.name}",
        StaticFiles(directory=settings.public_directory, check_dir=False),
        name="plugin_assets",
    )

    if settings.debug:
        logging.getLogger("engines").setLevel(logging.DEBUG)

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
