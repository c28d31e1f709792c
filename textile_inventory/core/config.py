from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from pathlib import Path
import os


load_dotenv()


class Settings(BaseSettings):
    app_name: str = "Textile Inventory API"
    debug: bool = False
    database_url: str = "sqlite:///./inventory.db"
    host: str = "127.0.0.1"
    port: int = 8000
    allowed_hosts: str = ""
    static_dir: Path = Path(__file__).parent.parent.parent / "static"
    log_file: str = "logs/application.log"

    # Raw material images
    max_image_size: int = 5 * 1024 * 1024
    default_page_size: int = 10
    max_page_size: int = 200


settings = Settings()


os.makedirs(settings.static_dir, exist_ok=True)
