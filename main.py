"""
Main entrypoint: AML screening API server.

Builds the FastAPI app (service is created in its lifespan handler from env
settings) and runs it with uvicorn.

Env: AML_ENV, AML_CACHE_BACKEND, AML_PROVIDER, REDIS_*, API_HOST, API_PORT, LOG_LEVEL.
Equivalent: uvicorn aml_screening.api_server.app:app --host 0.0.0.0 --port 8000
"""

from aml_screening.screening_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the API server in the main thread."""
    import uvicorn

    from aml_screening.api_server.app import app
    from aml_screening.config import get_settings

    settings = get_settings()
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port, env=settings.env)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
