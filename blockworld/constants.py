from enum import Enum

Vec3 = tuple[int, int, int]
ChunkKey = tuple[int, int]

TICKS_PER_SECOND = 60
CHUNK_SIZE = 16
WORLD_HEIGHT = 20
RENDER_DISTANCE = 3
CHUNK_REBUILD_BUDGET_MS = 4.0

GRAVITY = 20.0
WALK_SPEED = 5.0
JUMP_SPEED = 8.0
MOVE_ACCELERATION = 25.0
MOVE_DECELERATION = 20.0
PLAYER_HEIGHT = 1.8
PLAYER_RADIUS = 0.25
GROUND_EPSILON = 0.1
EYE_HEIGHT_FACTOR = 0.9

REACH_DISTANCE = 5.0
RAY_STEP = 0.005
# Entry depth into a cell is below RAY_STEP, so the entry face lies inside this band.
RAY_FACE_EPSILON = 0.01


class FaceDirection(Enum):
    PX = (1, 0, 0)
    NX = (-1, 0, 0)
    PY = (0, 1, 0)
    NY = (0, -1, 0)
    PZ = (0, 0, 1)
    NZ = (0, 0, -1)

    @property
    def offset(self) -> Vec3:
        return self.value


FACE_DIRECTIONS = tuple(FaceDirection)
