import math

import pyglet
from pyglet import gl
from pyglet.math import Mat4, Vec3

SKY_COLOR = (0.53, 0.81, 0.92, 1.0)
FIELD_OF_VIEW = 75.0
NEAR_PLANE = 0.1


def setup_gl() -> None:
    gl.glClearColor(*SKY_COLOR)
    gl.glEnable(gl.GL_BLEND)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)
    gl.glCullFace(gl.GL_BACK)


def camera_view(rotation: tuple[float, float], eye: tuple[float, float, float]) -> Mat4:
    """World-to-camera matrix for a (yaw, pitch) rotation in degrees."""
    yaw_deg, pitch_deg = rotation
    turn = Mat4.from_rotation(math.radians(yaw_deg), Vec3(0.0, 1.0, 0.0))
    tilt = Mat4.from_rotation(math.radians(-pitch_deg), Vec3(1.0, 0.0, 0.0))
    return tilt @ turn @ Mat4.from_translation(-Vec3(*eye))


def _fit_viewport(window: pyglet.window.Window) -> tuple[int, int]:
    width, height = window.get_framebuffer_size()
    gl.glViewport(0, 0, width, height)
    return width, max(1, height)


def set_3d(
    window: pyglet.window.Window,
    rotation: tuple[float, float],
    eye: tuple[float, float, float],
    far: float = 200.0,
) -> None:
    # Face culling relies on the counter-clockwise winding the mesher emits.
    gl.glEnable(gl.GL_DEPTH_TEST)
    gl.glEnable(gl.GL_CULL_FACE)
    width, height = _fit_viewport(window)
    window.projection = Mat4.perspective_projection(width / height, z_near=NEAR_PLANE, z_far=far, fov=FIELD_OF_VIEW)
    window.view = camera_view(rotation, eye)


def set_2d(window: pyglet.window.Window) -> None:
    gl.glDisable(gl.GL_DEPTH_TEST)
    gl.glDisable(gl.GL_CULL_FACE)
    width, height = _fit_viewport(window)
    window.projection = Mat4.orthogonal_projection(0.0, float(width), 0.0, float(height), -1.0, 1.0)
    window.view = Mat4()
