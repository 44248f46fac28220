import os
from dotenv import load_dotenv
from enum import Enum

# Load environment variables
load_dotenv()

# LLM Configuration
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-pro")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")

# MongoDB Configuration (optional; deals stay in memory without it)
MONGO_URI = os.getenv("MONGO_URI")
DB_NAME = os.getenv("DB_NAME", "valuation_copilot")
DEALS_COLLECTION = os.getenv("DEALS_COLLECTION", "deals")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "86400"))


class Sector(Enum):
    SAAS = "SaaS"
    AI_DEEPTECH = "AI/DeepTech"
    MARKETPLACE = "Marketplace"
    HARDWARE = "Hardware"
    CONSUMER = "Consumer"


class Region(Enum):
    US_TIER1 = "US_Tier1"
    US_TIER2 = "US_Tier2"
    EU_TIER1 = "EU_Tier1"
    EMERGING = "Emerging"


class ConversationStep(Enum):
    IDLE = "IDLE"
    ASKING_SECTOR = "ASKING_SECTOR"
    ASKING_REGION = "ASKING_REGION"
    ASKING_REVENUE = "ASKING_REVENUE"
    ASKING_TEAM = "ASKING_TEAM"


# Display labels for selectors
SECTOR_LABELS = {
    Sector.SAAS: "B2B SaaS",
    Sector.AI_DEEPTECH: "AI / Deep Tech",
    Sector.MARKETPLACE: "Marketplace",
    Sector.HARDWARE: "Hardware",
    Sector.CONSUMER: "Consumer App",
}

REGION_LABELS = {
    Region.US_TIER1: "US Tier 1 (SF/NYC)",
    Region.US_TIER2: "US Tier 2",
    Region.EU_TIER1: "EU Tier 1",
    Region.EMERGING: "Emerging Markets",
}

# Valuation Configuration
VALUATION_DEFAULTS = {
    "market_median": 10_000_000,
    "risk_adjustment_step": 250_000,
}

# Scorecard weights used when no context is supplied
DEFAULT_SCORECARD_WEIGHTS = {
    "team": 0.30,
    "opportunity": 0.25,
    "product": 0.15,
    "competition": 0.10,
    "marketing": 0.10,
    "investment_need": 0.05,
    "other": 0.05,
}

RISK_CATEGORIES = [
    "Management Risk",
    "Stage of Business",
    "Legislation/Political Risk",
    "Manufacturing Risk",
    "Sales and Marketing Risk",
    "Funding/Capital Raising Risk",
    "Competition Risk",
    "Technology Risk",
    "Litigation Risk",
    "International Risk",
    "Reputation Risk",
    "Exit Value Risk",
]

RISK_SCORE_RANGE = (-2, 2)

# Low / base / high multipliers for the VC sensitivity grid
SENSITIVITY_FACTORS = (0.8, 1.0, 1.2)

# Value written by "max" copilot commands
BERKUS_MAX_VALUE = 500_000

# Starting values for a fresh session
INITIAL_SCORECARD = {
    "market_average": VALUATION_DEFAULTS["market_median"],
    "team_score": 1.25,
}
INITIAL_VC = {
    "exit_revenue": 10_000_000,
    "investment_amount": 2_000_000,
}
INITIAL_COST_TO_DUPLICATE = {
    "labor_cost": 500_000,
    "ip_cost": 50_000,
    "equipment_cost": 20_000,
    "opportunity_cost_percent": 0.20,
}
BERKUS_SEED_RELATIONSHIPS = 250_000

# Persistence keys
DEAL_INDEX_KEY = "valuation_deals"
DEAL_KEY_PREFIX = "deal_"

# Copilot messages
GREETING_MESSAGE = (
    "Hi! I'm your Valuation Copilot. \n\nI can help you evaluate a startup step-by-step. "
    "Just say **'Evaluate an idea'** to get started, or give me a command like "
    "'Set exit revenue to $50M'."
)
AI_UNAVAILABLE_MESSAGE = "I couldn't reach the AI server. Please check your connection."
GUT_CHECK_UNAVAILABLE_MESSAGE = (
    "I'm having trouble analyzing that right now, so no adjustment was applied."
)
