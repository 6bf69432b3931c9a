import os
import yaml
from pathlib import Path
from dotenv import load_dotenv

class Config:
    def __init__(self):
        # Load appropriate .env file based on environment
        self.env = os.getenv("MATURA_ENV", "dev")
        self._load_env_file()

        # Project paths
        self.project_root = Path(__file__).parent.parent.parent
        self.generation_defaults_file = self.project_root / os.getenv(
            "GENERATION_DEFAULTS_FILE", "generation.yaml"
        )

        # Google AI settings (free-text provider)
        self.google_ai_api_key = os.getenv("GOOGLE_AI_API_KEY")
        self.google_ai_model = os.getenv("GOOGLE_AI_MODEL", "gemini-2.0-flash")

        # OpenAI settings (structured provider)
        self.openai_api_key = os.getenv("OPENAI_API_KEY")
        self.openai_model = os.getenv("OPENAI_MODEL", "gpt-4o")
        self.openai_text_model = os.getenv("OPENAI_TEXT_MODEL", "gpt-4o-mini")

        # Figma settings (design token provider)
        self.figma_api_key = os.getenv("FIGMA_API_KEY")
        self.figma_file_id = os.getenv("DEFAULT_FIGMA_FILE_ID")

        # Logging settings
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_format = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        # Default pipeline options from YAML
        self.generation_defaults = self._load_generation_defaults()

    def _load_env_file(self):
        """Load the appropriate .env file based on the environment."""
        env_file = ".env"

        # Check for environment-specific .env file
        if self.env != "dev":
            env_specific_file = f".env.{self.env}"
            if Path(env_specific_file).exists():
                env_file = env_specific_file
                print(f"Loading environment from {env_file}")
            else:
                print(f"Warning: {env_specific_file} not found, falling back to .env")

        load_dotenv(env_file)

    def _load_generation_defaults(self):
        """Load default generation options from YAML file."""
        if not self.generation_defaults_file.exists():
            return {}

        with open(self.generation_defaults_file, 'r') as file:
            defaults = yaml.safe_load(file) or {}
            return dict(defaults.get('generation', {}))

# Create a global config instance
config = Config()
