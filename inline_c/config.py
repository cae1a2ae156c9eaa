"""
Harness configuration
"""
from typing import Optional

from pydantic_settings import BaseSettings

from inline_c.policy.toolchain import OptLevel, ToolchainConvention


class Settings(BaseSettings):
    """Harness settings, read from ``INLINE_C_*`` variables or ``.env``"""

    # Meta environment variables: INLINE_C_RS_<name>=<value>
    META_ENV_PREFIX: str = "INLINE_C_RS_"

    # Compilers used when CC / CXX are not set
    DEFAULT_CC: str = "cc"
    DEFAULT_CXX: str = "c++"
    DEFAULT_MSVC: str = "cl"

    # Force a toolchain convention instead of detecting it
    TOOLCHAIN: Optional[ToolchainConvention] = None

    OPT_LEVEL: OptLevel = OptLevel.O2
    CXX_STANDARD: str = "c++11"

    # Temporary files
    TEMP_DIR: Optional[str] = None
    TEMP_PREFIX: str = "inline_c_"

    # Compiler working directory (defaults to the current directory)
    WORKING_DIR: Optional[str] = None

    class Config:
        env_prefix = "INLINE_C_"
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
