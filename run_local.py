from taskai.logging_utils import configure_logging
from taskai.main import create_app
from taskai.settings import settings

configure_logging("taskai_api")
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "run_local:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=False,
    )
