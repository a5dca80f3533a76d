import uvicorn

from listing_match.config import settings

if __name__ == "__main__":
    # Hugging Face Spaces expects the app to listen on 0.0.0.0:7860
    uvicorn.run("listing_match.main:app", host="0.0.0.0", port=7860, reload=False, log_level=settings.LOG_LEVEL.lower())
