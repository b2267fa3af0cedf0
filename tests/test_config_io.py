"""
Tests for configuration, metadata sidecars, I/O collaborators and the CLI.
"""

import json
import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from skimage import io as skio

from shadeforge.common.config import (
    EngineConfig, MeshMetadata, ShapeType, CarrierType, PatternType, parse_enum
)
from shadeforge.common.errors import InvalidParameter, UnsupportedShapeType, UnsupportedCarrierType
from shadeforge.common.io import load_image, save_mesh, load_mesh, build_metadata
from shadeforge.relief import LithophaneParameters, generate_relief_mesh
from shadeforge.shape import ShapeParameters, GeometricPoly, generate_shape_mesh
from shadeforge.run_all import main


# ============== Fixtures ==============

@pytest.fixture
def small_mesh():
    return generate_shape_mesh(ShapeParameters(variant=GeometricPoly(sides=8)))


# ============== Config Tests ==============

class TestEngineConfig:

    def test_default_values(self):
        config = EngineConfig()
        assert config.profile_steps == 60
        assert config.origami_profile_steps == 20
        assert config.union_overlap == 0.01
        assert config.material_density_g_cm3 == 1.25
        assert config.output_dir == Path("outputs")

    def test_json_round_trip(self, tmp_path):
        config = EngineConfig(profile_steps=30, output_dir=tmp_path / "out")
        path = tmp_path / "config.json"
        config.save(path)
        loaded = EngineConfig.from_json(path)
        assert loaded == config

    def test_to_dict_serializable(self):
        json.dumps(EngineConfig().to_dict())


class TestParseEnum:

    def test_passthrough(self):
        assert parse_enum(ShapeType, ShapeType.LATTICE) is ShapeType.LATTICE

    def test_string(self):
        assert parse_enum(PatternType, "hearts") is PatternType.HEARTS

    @pytest.mark.parametrize("enum_cls,error", [
        (ShapeType, UnsupportedShapeType),
        (CarrierType, UnsupportedCarrierType),
        (PatternType, InvalidParameter),
    ])
    def test_fails_closed(self, enum_cls, error):
        with pytest.raises(error):
            parse_enum(enum_cls, "nope")


# ============== I/O Tests ==============

class TestMetadata:

    def test_build(self, small_mesh):
        meta = build_metadata(small_mesh, "shape", "geometric_poly", {"sides": 8})
        assert meta.n_vertices == small_mesh.n_vertices
        assert meta.n_triangles == small_mesh.n_faces
        assert meta.is_watertight is True
        assert meta.volume_cm3 > 0

    def test_round_trip(self):
        meta = MeshMetadata("relief", "flat", 10, 8, True, 1.5, {"resolution": 4})
        assert MeshMetadata.from_dict(meta.to_dict()) == meta


class TestSaveLoadMesh:

    @pytest.mark.parametrize("suffix", [".stl", ".ply", ".obj"])
    def test_save_with_sidecar(self, tmp_path, small_mesh, suffix):
        meta = build_metadata(small_mesh, "shape", "geometric_poly")
        path = tmp_path / "nested" / f"lampshade-geometric_poly{suffix}"
        save_mesh(small_mesh, path, meta)

        assert path.exists()
        assert path.with_suffix(".json").exists()

        loaded, loaded_meta = load_mesh(path)
        assert loaded.n_faces == small_mesh.n_faces
        assert loaded_meta == meta

    def test_load_without_sidecar(self, tmp_path, small_mesh):
        path = tmp_path / "mesh.stl"
        small_mesh.to_trimesh().export(str(path))
        _, meta = load_mesh(path)
        assert meta is None


class TestLoadImage:

    def test_rgb_png(self, tmp_path):
        pixels = np.zeros((6, 9, 3), dtype=np.uint8)
        pixels[:, 4:] = 255
        path = tmp_path / "image.png"
        skio.imsave(str(path), pixels, check_contrast=False)

        image = load_image(path)
        assert image.width == 9
        assert image.height == 6
        assert image.pixels.shape == (6, 9, 4)
        np.testing.assert_array_equal(image.pixels[:, :, :3], pixels)

    def test_feeds_relief(self, tmp_path):
        pixels = np.linspace(0, 255, 40 * 20).reshape(20, 40).astype(np.uint8)
        path = tmp_path / "gray.png"
        skio.imsave(str(path), pixels, check_contrast=False)

        mesh = generate_relief_mesh(load_image(path), LithophaneParameters(resolution=10))
        assert mesh.n_vertices == 2 * 20 * 10


# ============== CLI Tests ==============

class TestCLI:

    def test_shape_types(self, tmp_path):
        main(["shape", "--type", "geometric_poly", "--type", "origami", "--output", str(tmp_path)])

        assert (tmp_path / "lampshade-geometric_poly.stl").exists()
        assert (tmp_path / "lampshade-origami.json").exists()
        with open(tmp_path / "run_summary.json") as f:
            summary = json.load(f)
        assert len(summary["results"]) == 2
        assert summary["errors"] == []
        assert "print_estimate" in summary["results"][0]["result"]

    def test_params_file(self, tmp_path):
        params_path = tmp_path / "params.json"
        with open(params_path, "w") as f:
            json.dump([{"type": "spiral_twist", "segments": 16}, {"type": "lattice", "grid_density": 4}], f)

        main(["shape", "--params", str(params_path), "--output", str(tmp_path / "out")])
        assert (tmp_path / "out" / "lampshade-spiral_twist.stl").exists()
        assert (tmp_path / "out" / "lampshade-lattice.stl").exists()

    def test_random_design(self, tmp_path):
        main(["shape", "--random", "5", "--output", str(tmp_path)])
        with open(tmp_path / "run_summary.json") as f:
            summary = json.load(f)
        assert summary["errors"] == []
        expected = ShapeParameters.random(5).shape_type.value
        assert (tmp_path / f"lampshade-{expected}.stl").exists()

    def test_relief_with_image(self, tmp_path):
        image_path = tmp_path / "img.png"
        skio.imsave(str(image_path), np.full((8, 8, 3), 128, dtype=np.uint8), check_contrast=False)
        params_path = tmp_path / "relief.json"
        with open(params_path, "w") as f:
            json.dump({"type": "arc", "resolution": 8}, f)

        main(["relief", "--image", str(image_path), "--params", str(params_path), "--output", str(tmp_path)])
        assert (tmp_path / "lithophane-arc.stl").exists()

    def test_relief_placeholder(self, tmp_path):
        main(["relief", "--output", str(tmp_path)])
        with open(tmp_path / "lithophane-flat.json") as f:
            meta = json.load(f)
        assert meta["kind"] == "relief"
        assert meta["is_watertight"] is True

    def test_invalid_job_exits(self, tmp_path):
        params_path = tmp_path / "bad.json"
        with open(params_path, "w") as f:
            json.dump({"type": "ribbed_drum", "segments": 2}, f)

        with pytest.raises(SystemExit) as exc:
            main(["shape", "--params", str(params_path), "--output", str(tmp_path)])
        assert exc.value.code == 1

        with open(tmp_path / "run_summary.json") as f:
            summary = json.load(f)
        assert len(summary["errors"]) == 1
        assert "segments" in summary["errors"][0]["error"]
