"""
Textbox Image Compositor - FastAPI Application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Optional, List
from loguru import logger
import sys

from config import settings
from modules import (
    Catalog,
    Compositor,
    Exporter,
    FontProvider,
    ImageService,
    Selector,
)
from utils.exceptions import CharacterNotFound, CompositionError

# Configure logging
settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
logger.remove()
logger.add(sys.stderr, level=settings.LOG_LEVEL)
logger.add(settings.LOGS_DIR / settings.LOG_FILE, rotation="100 MB", retention="10 days", level="DEBUG")


# Request/Response Models
class GenerateRequest(BaseModel):
    """Request model for image generation"""
    type: Optional[str] = Field(None, description="Client-defined request type (unused)")
    content: Optional[str] = Field(None, description="Client-defined content (unused)")
    textInput: str = Field("", description="Caption text rendered in the text box")
    characterId: Optional[str] = Field(None, description="Character id, 'random', or empty for the default")
    emotionIndex: Optional[int] = Field(None, description="1-based emotion index (random if missing)")
    backgroundIndex: Optional[int] = Field(None, description="1-based background index (random if missing)")


class GenerateResponse(BaseModel):
    """Response model for image generation"""
    success: bool
    imageData: Optional[str] = None
    character: Optional[str] = None
    message: Optional[str] = None


class CharacterResponse(BaseModel):
    id: str
    name: str


class EmotionResponse(BaseModel):
    id: int
    name: str


class BackgroundResponse(BaseModel):
    name: str
    filename: str


class StatusResponse(BaseModel):
    """Status response model"""
    status: str
    message: str


def build_service() -> ImageService:
    """
    Build the image service from settings

    The catalog is loaded once here and shared read-only by every request.
    """
    catalog = Catalog.load(
        settings.CATALOG_DIR,
        characters_file=settings.CHARACTERS_FILE,
        backgrounds_file=settings.BACKGROUNDS_FILE,
        default_character_id=settings.DEFAULT_CHARACTER,
    )
    compositor = Compositor(face_provider=FontProvider(settings.font_path))
    return ImageService(catalog, compositor, settings.ASSETS_DIR, selector=Selector(catalog))


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def create_app(service: ImageService = None, exporter: Exporter = None) -> FastAPI:
    """
    Create the FastAPI application

    Args:
        service: Image service (default: built from settings)
        exporter: Image encoder (default: in-memory only)
    """
    service = service or build_service()
    exporter = exporter or Exporter()
    catalog = service.catalog

    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description="Caption and name watermark compositor for character text boxes"
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=StatusResponse)
    async def health():
        """Health check endpoint"""
        return StatusResponse(status="healthy", message="All systems operational")

    @app.get("/api/characters", response_model=List[CharacterResponse])
    async def get_characters():
        """List characters sorted by id"""
        return catalog.list_characters()

    @app.get("/api/characters/current", response_model=CharacterResponse)
    async def get_current_character():
        """Return the default character"""
        try:
            character = catalog.default_character()
        except CharacterNotFound:
            logger.error(f"Default character '{catalog.default_character_id}' is not in the catalog")
            return error_response(500, "Default character not found")
        return CharacterResponse(id=character.id, name=character.name)

    @app.get("/api/characters/{character_id}/emotions", response_model=List[EmotionResponse])
    async def get_emotions(character_id: str):
        """List a character's emotions with 1-based ids"""
        try:
            return catalog.emotions(character_id)
        except CharacterNotFound as e:
            return error_response(400, e.message)

    @app.get("/api/backgrounds", response_model=List[BackgroundResponse])
    async def get_backgrounds():
        """List backgrounds"""
        return [{"name": b.name, "filename": b.filename} for b in catalog.backgrounds]

    @app.post("/api/generate", response_model=GenerateResponse)
    def generate(request: GenerateRequest):
        """
        Compose an image and return it as a PNG data URL

        Runs in the threadpool: composition is CPU-bound and shares no
        mutable state between requests.
        """
        try:
            result = service.generate(
                request.characterId,
                request.textInput,
                emotion_index=request.emotionIndex,
                background_index=request.backgroundIndex,
            )
        except CharacterNotFound as e:
            return error_response(500, e.message)
        except CompositionError as e:
            logger.error(f"Image generation failed: {e}")
            return error_response(500, f"Image generation failed: {e}")

        try:
            image_data = exporter.to_data_url(result.image)
        except OSError as e:
            logger.error(f"PNG encoding failed: {e}")
            return error_response(500, f"Image encoding failed: {e}")

        return GenerateResponse(
            success=True,
            imageData=image_data,
            character=result.selection.character.id,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=False
    )
