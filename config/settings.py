"""
Application settings and configuration.
"""

import os
from typing import List

class Settings:
    """Application settings"""
    
    # API Configuration
    api_title: str = "Plasmid Biofilm Simulation API"
    api_description: str = "API for simulating plasmid spread and loss in bacterial biofilms"
    api_version: str = "1.0.0"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    
    # Server Configuration
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    reload: bool = os.getenv("RELOAD", "true").lower() == "true"
    
    # CORS Configuration
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    ]
    allow_credentials: bool = True
    allowed_methods: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    allowed_headers: List[str] = ["*"]
    
    # Simulation limits
    max_world_size: int = int(os.getenv("MAX_WORLD_SIZE", "500"))
    max_simulation_time: int = int(os.getenv("MAX_SIMULATION_TIME", "100000"))
    max_trait_sampling_attempts: int = int(os.getenv("MAX_TRAIT_SAMPLING_ATTEMPTS", "10000"))
    
    # Logging Configuration
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

# Create global settings instance
settings = Settings() 
