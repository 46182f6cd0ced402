"""
Game constants and configuration.
"""

# Canvas / view
CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 600

# Player
PLAYER_WIDTH = 60
PLAYER_HEIGHT = 75
PLAYER_SPEED = 5.0          # units per tick
JUMP_FORCE = 12.0           # initial upward velocity of a jump
GRAVITY = 0.5               # added to vy every tick

# Chain
MAX_CHAIN_LENGTH = 150.0
CHAIN_STIFFNESS = 0.3

# World
GROUND_Y = 550
WORLD_SEED = 12345
CHUNK_SIZE = 400
MAX_JUMP_DISTANCE = 180
MAX_JUMP_HEIGHT = 150
PLATFORM_HEIGHT = 20
PLATFORM_MIN_Y = 280
PLATFORM_MAX_Y = GROUND_Y - 80
SPIKE_HEIGHT = 25
VISIBLE_MARGIN = 500        # chunks are loaded this far beyond the view

# Hazard thresholds
SPIKE_TOLERANCE = 5         # how far below the spike base a foot still counts
FALL_DEATH_DEPTH = 150      # below GROUND_Y
RESCUE_BAND = 50            # teammate above GROUND_Y + this keeps a faller alive

# Camera
CAMERA_SMOOTHING = 0.1

# Rooms
MAX_PLAYERS_PER_ROOM = 2
ROOM_CODE_LENGTH = 6
CHARACTERS = ('duck', 'dog')
SPAWN_X = 100
SPAWN_SPACING = 60
SPAWN_Y = 500
JOINER_SPAWN_X = 160

# Network defaults
DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 5000
DEFAULT_URL = 'http://127.0.0.1:5000'
DEFAULT_FPS = 60
MOVE_SEND_RATE = 0.3        # fraction of ticks that push a player-move
