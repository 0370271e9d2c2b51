"""Unit tests for scene-level intersection.

Tests cover:
- SceneHitRecord with material_id
- Sphere storage, validation and clearing
- Closest hit selection across several spheres
- Tie breaking by insertion order
"""

import pytest
import taichi as ti


def _run_intersect(origin, direction, t_min=0.001, t_max=1e10):
    """Run intersect_scene for one ray and return (hit, t, material_id, normal)."""
    from raytrace.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material = ti.field(dtype=ti.i32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(ray_origin: vec3, ray_direction: vec3, lo: ti.f32, hi: ti.f32):
        rec = intersect_scene(ray_origin, ray_direction, lo, hi)
        hit[None] = rec.hit
        t_val[None] = rec.t
        material[None] = rec.material_id
        normal[None] = rec.normal

    test_kernel(vec3(*origin), vec3(*direction), t_min, t_max)
    return hit[None], t_val[None], material[None], normal[None]


class TestSceneHitRecordBasics:
    """Tests for SceneHitRecord dataclass."""

    def test_scene_hit_record_has_material_id(self):
        """Test that SceneHitRecord includes material_id field."""
        from raytrace.scene.intersection import SceneHitRecord, vec3

        result_material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = SceneHitRecord(
                hit=1,
                t=5.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 0.0, 1.0),
                front_face=1,
                material_id=42,
            )
            result_material_id[None] = rec.material_id

        test_kernel()
        assert result_material_id[None] == 42

    def test_empty_scene_miss_has_negative_material_id(self):
        """Test that a miss reports material_id = -1."""
        hit, _, material_id, _ = _run_intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert material_id == -1


class TestSceneSphereStorage:
    """Tests for scene sphere storage and management."""

    def test_add_sphere(self):
        """Test adding a sphere to the scene."""
        from raytrace.scene.intersection import add_sphere, get_sphere_count, vec3

        assert get_sphere_count() == 0
        idx = add_sphere(vec3(1.0, 2.0, 3.0), 0.5, material_id=1)
        assert idx == 0
        assert get_sphere_count() == 1

    def test_add_sphere_returns_sequential_indices(self):
        from raytrace.scene.intersection import add_sphere, vec3

        indices = [add_sphere(vec3(0.0, 0.0, -i), 0.1, material_id=0) for i in range(3)]
        assert indices == [0, 1, 2]

    def test_add_sphere_stores_data(self):
        """Test sphere data lands in the storage fields."""
        from raytrace.scene.intersection import add_sphere, get_sphere, vec3

        add_sphere(vec3(1.0, 2.0, 3.0), 0.5, material_id=7)
        center, radius, material_id = get_sphere(0)
        assert center == pytest.approx((1.0, 2.0, 3.0))
        assert radius == pytest.approx(0.5)
        assert material_id == 7

    def test_get_sphere_out_of_range(self):
        from raytrace.scene.intersection import add_sphere, get_sphere, vec3

        with pytest.raises(IndexError):
            get_sphere(0)
        add_sphere(vec3(0.0, 0.0, 0.0), 1.0)
        with pytest.raises(IndexError):
            get_sphere(1)

    @pytest.mark.parametrize("radius", [0.0, -1.0, float("nan")])
    def test_add_sphere_rejects_bad_radius(self, radius):
        from raytrace.scene.intersection import add_sphere, get_sphere_count, vec3

        with pytest.raises(ValueError, match="radius"):
            add_sphere(vec3(0.0, 0.0, 0.0), radius, material_id=0)
        assert get_sphere_count() == 0

    def test_clear_scene(self):
        """Test clearing all spheres from the scene."""
        from raytrace.scene.intersection import (
            add_sphere,
            clear_scene,
            get_sphere_count,
            vec3,
        )

        add_sphere(vec3(0.0, 0.0, 0.0), 1.0, material_id=0)
        add_sphere(vec3(2.0, 0.0, 0.0), 1.0, material_id=0)
        assert get_sphere_count() == 2

        clear_scene()
        assert get_sphere_count() == 0

    def test_capacity_exceeded(self, monkeypatch):
        """Test adding beyond capacity raises RuntimeError."""
        from raytrace.scene import intersection
        from raytrace.scene.intersection import add_sphere, vec3

        monkeypatch.setattr(intersection, "MAX_SPHERES", 2)
        add_sphere(vec3(0.0, 0.0, 0.0), 1.0)
        add_sphere(vec3(0.0, 0.0, 0.0), 1.0)
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere(vec3(0.0, 0.0, 0.0), 1.0)


class TestSceneIntersection:
    """Tests for closest-hit queries."""

    def test_empty_scene_misses(self):
        hit, _, material_id, _ = _run_intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert material_id == -1

    def test_single_sphere_hit(self):
        from raytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=3)

        hit, t, material_id, normal = _run_intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 0.5) < 1e-5
        assert material_id == 3
        assert abs(normal[2] - 1.0) < 1e-5

    def test_closest_sphere_wins_regardless_of_order(self):
        """Test the nearer sphere is reported even when added last."""
        from raytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -5.0), 0.5, material_id=1)
        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, material_id=2)

        hit, t, material_id, _ = _run_intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert material_id == 2

    def test_closest_sphere_wins_when_added_first(self):
        from raytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, material_id=2)
        add_sphere(vec3(0.0, 0.0, -5.0), 0.5, material_id=1)

        _, t, material_id, _ = _run_intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert abs(t - 1.5) < 1e-5
        assert material_id == 2

    def test_exact_tie_keeps_first_inserted(self):
        """Test identical spheres resolve to the one added first."""
        from raytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=10)
        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=20)

        hit, _, material_id, _ = _run_intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert material_id == 10

    def test_shared_material_id(self):
        """Test two spheres can reference the same material id."""
        from raytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(-1.0, 0.0, -1.0), 0.5, material_id=4)
        add_sphere(vec3(1.0, 0.0, -1.0), 0.5, material_id=4)

        _, _, left_id, _ = _run_intersect((0.0, 0.0, 0.0), (-1.0, 0.0, -1.0))
        _, _, right_id, _ = _run_intersect((0.0, 0.0, 0.0), (1.0, 0.0, -1.0))
        assert left_id == 4
        assert right_id == 4

    def test_t_min_skips_surface_at_origin(self):
        """Test a ray leaving a surface does not re-hit it at t ~ 0."""
        from raytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 1.0, material_id=0)

        # Origin lies on the sphere surface, pointing outward
        hit, _, _, _ = _run_intersect((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_inside_sphere_reports_exit(self):
        from raytrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, 0.0), 2.0, material_id=5)

        hit, t, material_id, normal = _run_intersect((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert material_id == 5
        # Normal faces the ray
        assert normal[0] < 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
