"""Configuration for the NBA pick engine."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Paths
BASE_DIR = Path(__file__).parent
DB_PATH = BASE_DIR / "picks.db"
DB_URL = os.getenv("DB_URL", "")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# API Keys
ODDS_API_KEY = os.getenv("ODDS_API_KEY", "")
API_SPORTS_KEY = os.getenv("API_SPORTS_KEY", "")

# API Endpoints
ODDS_API_BASE = "https://api.the-odds-api.com/v4"
API_SPORTS_BASE = "https://v2.nba.api-sports.io"
REQUEST_TIMEOUT = 30

SPORT = "NBA"
ODDS_SPORT_KEY = "basketball_nba"
ODDS_REGION = "us"
NBA_SEASON = os.getenv("NBA_SEASON", "2024")

# Stats aggregation
DEFAULT_PACE = 100.0        # No play-by-play input, so pace is a constant
RECENT_GAMES_WINDOW = 5

# Prediction model
LEAGUE_AVG_PACE = 98.5
WIN_PROB_SLOPE = 0.03
WIN_PROB_MIN = 0.01
WIN_PROB_MAX = 0.99

# Scanner thresholds
SPREAD_EDGE_THRESHOLD = 2.0     # points
TOTAL_EDGE_THRESHOLD = 5.0      # points
ML_PROB_EDGE_THRESHOLD = 0.08   # model prob - implied prob
ML_MIN_MODEL_PROB = 0.40
UNDERDOG_MIN_ODDS = 100         # American odds strictly above this are dogs
EDGE_SCALE = 2.0
DEFAULT_SPREAD_ODDS = -110

# Injury / fatigue adjustments applied by the scanner
STAR_INJURY_PENALTY = 3.0       # spread points per missing star
BACK_TO_BACK_PENALTY = 3.0
BACK_TO_BACK_MAX_REST = 1       # days_rest <= this counts as a back-to-back
TOTAL_STAR_PENALTY = 1.5
TOTAL_FATIGUE_PENALTY = 1.0
INJURY_OUT_TYPES = ("Out", "Missing")

# Matchup analysis
ANALYSIS_BET_GAP = 4.0

# Backtesting
BACKTEST_SEED = int(os.environ["BACKTEST_SEED"]) if os.getenv("BACKTEST_SEED") else None
MIN_HISTORY_GAMES = 20
SPREAD_NOISE = 2.0
TOTAL_NOISE = 8.0
MONEYLINE_NOISE = 15.0
SPREAD_MARKET_SHRINK = 0.9
MONEYLINE_MARKET_SHRINK = 0.5
DOG_SPREAD_CUTOFF = 1.5
DOG_ODDS_PER_POINT = 22
MIN_DOG_ODDS = 110

# Optimizer
OPTIMIZER_ITERATIONS = 50
OPTIMIZER_VARIABILITY = 0.5

# Cross-venue comparison
ARB_MIN_EDGE = 0.05

# Players whose absence moves a line
STAR_PLAYERS = {
    "Nikola Jokic",
    "Shai Gilgeous-Alexander",
    "Giannis Antetokounmpo",
    "Luka Doncic",
    "Joel Embiid",
    "Jayson Tatum",
    "Stephen Curry",
    "LeBron James",
    "Anthony Davis",
    "Kevin Durant",
    "Anthony Edwards",
    "Donovan Mitchell",
    "Jalen Brunson",
    "Devin Booker",
    "Victor Wembanyama",
    "Tyrese Haliburton",
    "Ja Morant",
    "Damian Lillard",
    "Kawhi Leonard",
    "Jimmy Butler",
    "Domantas Sabonis",
    "Trae Young",
    "Zion Williamson",
    "De'Aaron Fox",
    "Paolo Banchero",
    "Cade Cunningham",
    "Jaylen Brown",
    "Kyrie Irving",
    "Bam Adebayo",
    "Tyrese Maxey",
}

# Team name mappings (API-Sports -> The Odds API)
TEAM_MAPPINGS = {
    "Atlanta Hawks": "Atlanta Hawks",
    "Boston Celtics": "Boston Celtics",
    "Brooklyn Nets": "Brooklyn Nets",
    "Charlotte Hornets": "Charlotte Hornets",
    "Chicago Bulls": "Chicago Bulls",
    "Cleveland Cavaliers": "Cleveland Cavaliers",
    "Dallas Mavericks": "Dallas Mavericks",
    "Denver Nuggets": "Denver Nuggets",
    "Detroit Pistons": "Detroit Pistons",
    "Golden State Warriors": "Golden State Warriors",
    "Houston Rockets": "Houston Rockets",
    "Indiana Pacers": "Indiana Pacers",
    "LA Clippers": "Los Angeles Clippers",
    "Los Angeles Lakers": "Los Angeles Lakers",
    "Memphis Grizzlies": "Memphis Grizzlies",
    "Miami Heat": "Miami Heat",
    "Milwaukee Bucks": "Milwaukee Bucks",
    "Minnesota Timberwolves": "Minnesota Timberwolves",
    "New Orleans Pelicans": "New Orleans Pelicans",
    "New York Knicks": "New York Knicks",
    "Oklahoma City Thunder": "Oklahoma City Thunder",
    "Orlando Magic": "Orlando Magic",
    "Philadelphia 76ers": "Philadelphia 76ers",
    "Phoenix Suns": "Phoenix Suns",
    "Portland Trail Blazers": "Portland Trail Blazers",
    "Sacramento Kings": "Sacramento Kings",
    "San Antonio Spurs": "San Antonio Spurs",
    "Toronto Raptors": "Toronto Raptors",
    "Utah Jazz": "Utah Jazz",
    "Washington Wizards": "Washington Wizards",
}
