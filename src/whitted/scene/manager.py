"""Scene manager for building scenes from Python.

The SceneManager is the façade over the module-level Taichi arenas: it
registers textures, materials, elements and lights, validates ids across
them, and keeps Python-side info records in the same order as the arenas
(so the position of a record in scene.elements is its element id).

RenderSettings carries the per-render parameters: image size, field of
view, shadow bias and maximum recursion depth.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.manager import RenderSettings, SceneManager
    >>> scene = SceneManager(RenderSettings(width=320, height=240))
    >>> red = scene.add_diffuse_material(albedo=0.18, color=(1.0, 0.0, 0.0))
    >>> scene.add_sphere(center=(0.0, 0.0, -5.0), radius=1.0, material_id=red)
    0
    >>> scene.add_directional_light((0.0, 0.0, -1.0), (1.0, 1.0, 1.0), 20.0)
    0
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import numpy.typing as npt

from src.whitted.camera.pinhole import PinholeCamera
from src.whitted.core.vector import Point, Vector3
from src.whitted.lighting.lights import (
    LightType,
    add_directional_light,
    add_spherical_light,
    clear_lights,
    get_light_count,
)
from src.whitted.materials.coloration import add_texture, clear_textures, get_texture_size
from src.whitted.materials.material import (
    SurfaceType,
    add_material,
    clear_materials,
    get_material_count,
)
from src.whitted.scene.intersection import (
    ElementKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_element_count,
)

logger = logging.getLogger(__name__)


@dataclass
class RenderSettings:
    """Parameters of a render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels; must not exceed width.
        fov: Field of view in degrees, in (0, 180).
        shadow_bias: Offset applied along the normal to secondary ray
            origins. Small, positive and finite.
        max_recursion_depth: Maximum number of reflection/refraction
            bounces. 0 renders black.
    """

    width: int
    height: int
    fov: float = 90.0
    shadow_bias: float = 1e-6
    max_recursion_depth: int = 10

    def __post_init__(self):
        # Camera preconditions on size and fov
        self.camera()
        if not 0.0 < self.shadow_bias < math.inf:
            raise ValueError(f"Shadow bias must be positive and finite, got {self.shadow_bias}")
        if self.max_recursion_depth < 0:
            raise ValueError(
                f"Max recursion depth must be non-negative, got {self.max_recursion_depth}"
            )

    def camera(self) -> PinholeCamera:
        """The pinhole camera for these settings."""
        return PinholeCamera(width=self.width, height=self.height, fov=self.fov)


@dataclass
class TextureInfo:
    """A texture uploaded to the texture atlas.

    Attributes:
        width: Texture width in pixels.
        height: Texture height in pixels.
    """

    width: int
    height: int


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        surface_type: DIFFUSE, REFLECTIVE or REFRACTIVE.
        params: The material parameters as provided during creation.
    """

    surface_type: SurfaceType
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """A sphere element.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material assigned to the sphere.
    """

    center: tuple[float, float, float]
    radius: float
    material_id: int
    kind: ElementKind = field(default=ElementKind.SPHERE, init=False)


@dataclass
class PlaneInfo:
    """An infinite plane element.

    Attributes:
        point: Any point on the plane.
        normal: Unit normal, pointing away from the visible side.
        material_id: The material assigned to the plane.
    """

    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    material_id: int
    kind: ElementKind = field(default=ElementKind.PLANE, init=False)


@dataclass
class LightInfo:
    """A light source.

    Attributes:
        light_type: DIRECTIONAL or SPHERICAL.
        vector: Direction of travel (directional) or position (spherical).
        color: RGB color.
        intensity: Non-negative intensity.
    """

    light_type: LightType
    vector: tuple[float, float, float]
    color: tuple[float, float, float]
    intensity: float


class SceneManager:
    """Builds a scene in the Taichi arenas and tracks what was added.

    Only one scene is live at a time: constructing a SceneManager clears
    the arenas.

    Attributes:
        settings: Render parameters for this scene.
        textures: TextureInfo per texture id.
        materials: MaterialInfo per material id.
        elements: SphereInfo or PlaneInfo per element id.
        lights: LightInfo per light id.
    """

    def __init__(self, settings: RenderSettings) -> None:
        self.settings = settings
        self.textures: list[TextureInfo] = []
        self.materials: list[MaterialInfo] = []
        self.elements: list[SphereInfo | PlaneInfo] = []
        self.lights: list[LightInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_lights()
        clear_materials()
        clear_textures()
        self.textures.clear()
        self.materials.clear()
        self.elements.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Remove every texture, material, element and light."""
        self._clear_all()
        logger.debug("Cleared scene")

    # =========================================================================
    # Textures and Materials
    # =========================================================================

    def add_texture(self, image: npt.ArrayLike) -> int:
        """Upload a decoded image as a texture.

        Args:
            image: (H, W), (H, W, 3) or (H, W, 4) array. uint8 values are
                scaled to [0, 1]; alpha is ignored.

        Returns:
            The texture id.
        """
        texture_id = add_texture(image)
        width, height = get_texture_size(texture_id)
        self.textures.append(TextureInfo(width=width, height=height))
        return texture_id

    def add_material(
        self,
        albedo: float,
        color: tuple[float, float, float] | None = None,
        texture_id: int | None = None,
        surface_type: SurfaceType = SurfaceType.DIFFUSE,
        reflectivity: float = 0.0,
        index: float = 1.0,
        transparency: float = 0.0,
    ) -> int:
        """Register a material. See materials.material.add_material.

        Returns:
            The material id.
        """
        material_id = add_material(
            albedo,
            color=color,
            texture_id=texture_id,
            surface_type=surface_type,
            reflectivity=reflectivity,
            index=index,
            transparency=transparency,
        )
        params: dict[str, Any] = {"albedo": albedo}
        if color is not None:
            params["color"] = tuple(color)
        else:
            params["texture_id"] = texture_id
        if surface_type == SurfaceType.REFLECTIVE:
            params["reflectivity"] = reflectivity
        elif surface_type == SurfaceType.REFRACTIVE:
            params["index"] = index
            params["transparency"] = transparency
        self.materials.append(MaterialInfo(surface_type=SurfaceType(surface_type), params=params))
        return material_id

    def add_diffuse_material(
        self,
        albedo: float,
        color: tuple[float, float, float] | None = None,
        texture_id: int | None = None,
    ) -> int:
        """Register a purely diffuse material."""
        return self.add_material(albedo, color=color, texture_id=texture_id)

    def add_reflective_material(
        self,
        albedo: float,
        reflectivity: float,
        color: tuple[float, float, float] | None = None,
        texture_id: int | None = None,
    ) -> int:
        """Register a material that blends its diffuse color with a mirror reflection."""
        return self.add_material(
            albedo,
            color=color,
            texture_id=texture_id,
            surface_type=SurfaceType.REFLECTIVE,
            reflectivity=reflectivity,
        )

    def add_refractive_material(
        self,
        albedo: float,
        index: float,
        transparency: float,
        color: tuple[float, float, float] | None = None,
        texture_id: int | None = None,
    ) -> int:
        """Register a material that blends its diffuse color with transmitted light.

        Args:
            albedo: Diffuse reflectance in (0, 1].
            index: Index of refraction (>= 1). Glass is about 1.5.
            transparency: Weight of the transmitted color in [0, 1].
            color: Constant surface color.
            texture_id: Texture for the surface color.

        Returns:
            The material id.
        """
        return self.add_material(
            albedo,
            color=color,
            texture_id=texture_id,
            surface_type=SurfaceType.REFRACTIVE,
            index=index,
            transparency=transparency,
        )

    def get_material_count(self) -> int:
        """Get the number of materials in the scene."""
        return get_material_count()

    def get_texture_count(self) -> int:
        return len(self.textures)

    # =========================================================================
    # Elements
    # =========================================================================

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Raises:
            ValueError: If the radius is not positive or material_id is invalid.
            RuntimeError: If the maximum number of elements is exceeded.
        """
        self._check_material_id(material_id)
        c = Point.of(center)
        element_id = add_sphere(c.to_tuple(), radius, material_id)
        self.elements.append(
            SphereInfo(center=c.to_tuple(), radius=radius, material_id=material_id)
        )
        logger.debug("Added sphere %d at %s r=%g", element_id, c.to_tuple(), radius)
        return element_id

    def add_plane(
        self,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
        material_id: int,
    ) -> int:
        """Add an infinite plane to the scene.

        The plane is visible from the side opposite its normal; a floor
        below the camera has normal (0, -1, 0).

        Raises:
            ValueError: If the normal is zero or material_id is invalid.
            RuntimeError: If the maximum number of elements is exceeded.
        """
        self._check_material_id(material_id)
        p = Point.of(point)
        n = Vector3.of(normal).normalize()
        element_id = add_plane(p.to_tuple(), n.to_tuple(), material_id)
        self.elements.append(
            PlaneInfo(point=p.to_tuple(), normal=n.to_tuple(), material_id=material_id)
        )
        logger.debug("Added plane %d through %s facing %s", element_id, p.to_tuple(), n.to_tuple())
        return element_id

    def add_element(self, element: SphereInfo | PlaneInfo) -> int:
        """Append an element described by an info record.

        Returns:
            The element id.
        """
        if isinstance(element, SphereInfo):
            return self.add_sphere(element.center, element.radius, element.material_id)
        if isinstance(element, PlaneInfo):
            return self.add_plane(element.point, element.normal, element.material_id)
        raise TypeError(f"Unsupported element type: {type(element).__name__}")

    def get_element_count(self) -> int:
        """Get the number of elements in the scene."""
        return get_element_count()

    # =========================================================================
    # Lights
    # =========================================================================

    def add_directional_light(
        self,
        direction: tuple[float, float, float],
        color: tuple[float, float, float],
        intensity: float,
    ) -> int:
        """Add a light at infinity travelling along direction."""
        light_id = add_directional_light(direction, color, intensity)
        d = Vector3.of(direction).normalize()
        self.lights.append(
            LightInfo(LightType.DIRECTIONAL, d.to_tuple(), tuple(color), intensity)
        )
        return light_id

    def add_spherical_light(
        self,
        position: tuple[float, float, float],
        color: tuple[float, float, float],
        intensity: float,
    ) -> int:
        """Add a point light with inverse-square falloff."""
        light_id = add_spherical_light(position, color, intensity)
        self.lights.append(
            LightInfo(LightType.SPHERICAL, Point.of(position).to_tuple(), tuple(color), intensity)
        )
        return light_id

    def add_light(self, light: LightInfo) -> int:
        """Append a light described by an info record.

        Returns:
            The light id.
        """
        if light.light_type == LightType.DIRECTIONAL:
            return self.add_directional_light(light.vector, light.color, light.intensity)
        return self.add_spherical_light(light.vector, light.color, light.intensity)

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()
