from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = "local"
    debug: bool = True

    # Built-in skin defaults. Each is run through the same validators as user
    # overrides before it reaches a renderer.
    default_bg_skin: str = "linear-gradient(135deg, #ff3399, #33ccff)"
    default_border_skin: str = "2px solid rgba(255, 255, 255, 0.2)"
    default_text_skin: str = "white"
    default_selection_bg_skin: str = "#000"
    default_selection_text_skin: str = "#FFF"

    # How long a die spins before the renderer marks it stopped.
    spin_duration_seconds: float = 2.0
    # Added to each die's stacking order to build its z-index.
    stacking_base: int = 1000

    # Upper bound on live tables held by the web app; the oldest is destroyed first.
    max_sessions: int = 100
    # Most dice a single HTTP roll request may ask for.
    max_dice_per_roll: int = 100


settings = Settings()
