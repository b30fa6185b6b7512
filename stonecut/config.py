from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Float tolerances
    LENGTH_EPSILON: float = 1e-6
    AREA_TOLERANCE_M2: float = 1e-4

    # Mandatory pricing: cutting is absorbed into a percentage markup
    MANDATORY_PERCENTAGE_DEFAULT: float = 20.0

    # Cutting type codes in the price table
    LONGITUDINAL_CUT_CODE: str = "LONG"
    CROSS_CUT_CODE: str = "CROSS"

    # Used when the price table has no entry for a code
    DEFAULT_LONGITUDINAL_RATE: float = 0.0
    DEFAULT_CROSS_RATE: float = 0.0

    # Optional JSON {code: price_per_meter} merged over the built-in price table
    CUTTING_PRICES_PATH: str = ""

    class Config:
        env_file = ".env"
        env_prefix = "STONECUT_"
        extra = "ignore"


settings = Settings()
