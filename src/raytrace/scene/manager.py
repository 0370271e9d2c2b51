"""Scene building: one material id space over every material registry.

Lambertian and metal parameters live in separate per-type registries, each
with its own local indices. SceneManager hands out a single, global material
id per material and keeps a slot table on the device recording, for every
id, the material's type and its index inside that type's registry. The
integrator reads the slot table to pick the scattering function.

Spheres name their material by id, so one material can be shared by any
number of spheres. A scene can be exported to and rebuilt from a plain dict,
which is the form used for JSON files.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> gray = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=gray)
    0
    >>> scene.add_sphere(center=(0, -100.5, -1), radius=100.0, material_id=gray)
    1
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from raytrace.materials.lambertian import add_lambertian_material, clear_lambertian_materials
from raytrace.materials.metal import add_metal_material, clear_metal_materials
from raytrace.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    vec3,
)


class MaterialType(IntEnum):
    """Closed set of material kinds the integrator knows how to scatter."""

    LAMBERTIAN = 0
    METAL = 1


# Capacity of the global id space; each registry has its own, smaller limit
MAX_MATERIALS = 512


@ti.dataclass
class MaterialSlot:
    """Device-side entry for one material id."""

    kind: ti.i32
    index: ti.i32


material_slots = MaterialSlot.field(shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """MaterialType value of material_id, or -1 if the id is not registered."""
    kind = -1
    if 0 <= material_id < num_materials[None]:
        kind = material_slots[material_id].kind
    return kind


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Index of material_id inside its type's registry, or -1 if unregistered.

    Pass the result to the type's ``scatter_*_by_id`` function.
    """
    index = -1
    if 0 <= material_id < num_materials[None]:
        index = material_slots[material_id].index
    return index


@dataclass
class MaterialInfo:
    """Host-side record of a registered material.

    Attributes:
        material_id: Global id, as stored on spheres.
        material_type: Which registry holds the parameters.
        type_index: Position inside that registry.
        params: Constructor arguments, kept for serialization.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of a sphere, mirroring the device storage."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Serializable scene description.

    Attributes:
        materials: One dict per material, in id order. Each has a ``type``
            key ("lambertian" or "metal") plus that type's parameters.
        spheres: One dict per sphere with ``center``, ``radius`` and
            ``material_id``, in insertion order.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}: {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Builds the active scene.

    Scene data lives in module-level Taichi fields, so there is exactly one
    active scene per process. Constructing a SceneManager (or calling
    ``clear``) empties the sphere list, both material registries and the
    material id table.

    Attributes:
        materials: MaterialInfo per registered material, indexed by id.
        spheres: SphereInfo per sphere, in insertion order.
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material, on the host and the device."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()
        self.materials = []
        self.spheres = []

    # -------------------------------------------------------------------------
    # Materials
    # -------------------------------------------------------------------------

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = int(num_materials[None])
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_slots.kind[material_id] = int(material_type)
        material_slots.index[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(MaterialInfo(material_id, material_type, type_index, params))
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a diffuse material and return its global id.

        Raises:
            ValueError: If an albedo component is outside [0, 1].
            RuntimeError: If a material capacity is exhausted.
        """
        type_index = add_lambertian_material(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Register a metal material and return its global id.

        Args:
            albedo: Reflected color, components in [0, 1].
            fuzz: Radius of the perturbation added to the mirror direction,
                in [0, 1]. Zero is a perfect mirror.

        Raises:
            ValueError: If albedo or fuzz is out of range.
            RuntimeError: If a material capacity is exhausted.
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Look up a material by id; None when the id is unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Host-side counterpart of the get_material_type Taichi function."""
        info = self.get_material_info(material_id)
        return None if info is None else info.material_type

    # -------------------------------------------------------------------------
    # Spheres
    # -------------------------------------------------------------------------

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Append a sphere that uses an already registered material.

        Returns:
            The sphere's index in the scene.

        Raises:
            ValueError: If material_id is not registered or radius is not
                positive.
            RuntimeError: If the sphere capacity is exhausted.
        """
        if not 0 <= material_id < num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(vec3(center[0], center[1], center[2]), radius, material_id)
        self.spheres.append(SphereInfo(sphere_index, tuple(center), radius, material_id))
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with its own new diffuse material.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with its own new metal material.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_config(self) -> SceneConfig:
        """Describe the current scene with JSON-compatible values only."""
        materials = []
        for info in self.materials:
            entry: dict[str, Any] = {"type": info.material_type.name.lower()}
            for key, value in info.params.items():
                entry[key] = list(value) if isinstance(value, tuple) else value
            materials.append(entry)

        spheres = [
            {"center": list(s.center), "radius": s.radius, "material_id": s.material_id}
            for s in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by config.

        Materials are registered first and in order, so each sphere's
        ``material_id`` is a position in ``config.materials``. Type names are
        case-insensitive.

        Raises:
            ValueError: On an unknown material type, a malformed vector, an
                out-of-range parameter or a dangling material id.
        """
        self.clear()

        for entry in config.materials:
            kind = str(entry.get("type", "")).lower()
            if kind == "lambertian":
                self.add_lambertian_material(_as_triple(entry.get("albedo", (0.5, 0.5, 0.5))))
            elif kind == "metal":
                self.add_metal_material(
                    _as_triple(entry.get("albedo", (0.8, 0.8, 0.8))),
                    float(entry.get("fuzz", 0.0)),
                )
            else:
                raise ValueError(f"Unknown material type: {kind}")

        for entry in config.spheres:
            self.add_sphere(
                _as_triple(entry.get("center", (0.0, 0.0, 0.0))),
                float(entry.get("radius", 1.0)),
                int(entry.get("material_id", 0)),
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as ``{"materials": [...], "spheres": [...]}``."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from the dict form produced by to_dict."""
        self.from_config(
            SceneConfig(
                materials=list(data.get("materials", [])),
                spheres=list(data.get("spheres", [])),
            )
        )

    # -------------------------------------------------------------------------
    # Capacity
    # -------------------------------------------------------------------------

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
