"""
Tests for parameter defaults, validation and JSON loading.
"""

import json
import math

import pytest
from sph2d.config import (
    SimulationConfig, SolverSettings, StandardFluidParameters,
    ViscoelasticFluidParameters, load_config,
)
from sph2d.errors import ConfigurationError


class TestStandardParameters:

    def test_defaults(self):
        p = StandardFluidParameters()
        assert p.kernel_radius == 16.0
        assert p.mass == 2.5
        assert p.viscosity == 200.0
        assert p.gas_constant == 2000.0
        assert p.rest_density == 300.0
        assert p.gravity == (0.0, -9.8)
        assert p.time_step == 0.0007
        assert (p.view_width, p.view_height) == (1200.0, 900.0)
        assert p.point_size == 8.0

    @pytest.mark.parametrize("key,value", [
        ("kernel_radius", 0.0), ("mass", -1.0), ("time_step", math.inf),
        ("view_width", 0.0), ("particle_radius", math.nan),
    ])
    def test_rejects_bad_values(self, key, value):
        with pytest.raises(ConfigurationError, match=key):
            StandardFluidParameters(**{key: value}).validate()

    def test_from_dict(self):
        p = StandardFluidParameters.from_dict({"mass": 3.0, "gravity": [0.0, -1.0]})
        assert p.mass == 3.0
        assert p.gravity == (0.0, -1.0)

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigurationError, match="viscosty"):
            StandardFluidParameters.from_dict({"viscosty": 1.0})


class TestViscoelasticParameters:

    def test_derived_values(self):
        p = ViscoelasticFluidParameters()
        assert p.kernel_radius == pytest.approx(0.18)
        assert p.view_height == pytest.approx(9.375)
        assert p.time_step == pytest.approx(1.0 / 300.0)
        assert p.point_size == pytest.approx(6.4)

    def test_explicit_values_kept(self):
        p = ViscoelasticFluidParameters(kernel_radius=0.25, view_height=5.0)
        assert p.kernel_radius == 0.25
        assert p.view_height == 5.0

    def test_kernel_radius_follows_particle_radius(self):
        p = ViscoelasticFluidParameters.from_dict({"particle_radius": 0.05})
        assert p.kernel_radius == pytest.approx(0.3)

    @pytest.mark.parametrize("substeps", [0, -1, 2.5])
    def test_rejects_bad_substeps(self, substeps):
        with pytest.raises(ConfigurationError, match="substeps"):
            ViscoelasticFluidParameters(substeps=substeps).validate()

    def test_rejects_bad_gravity(self):
        with pytest.raises(ConfigurationError, match="gravity"):
            ViscoelasticFluidParameters(gravity=(0.0, -9.8, 0.0)).validate()


class TestSolverSettings:

    def test_defaults_valid(self):
        settings = SolverSettings()
        settings.validate()
        assert settings.backend == "auto"
        assert settings.delimiter == ";"

    def test_rejects_backend(self):
        with pytest.raises(ConfigurationError, match="backend"):
            SolverSettings(backend="gpu").validate()

    @pytest.mark.parametrize("delimiter", ["", " ", ".", "-", "1", "\n"])
    def test_rejects_delimiter(self, delimiter):
        with pytest.raises(ConfigurationError):
            SolverSettings(delimiter=delimiter).validate()

    def test_rejects_max_neighbors(self):
        with pytest.raises(ConfigurationError):
            SolverSettings(max_neighbors=0).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SolverSettings(backend="gpu").validate()


class TestLoadConfig:

    def test_partial_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "standard": {"viscosity": 50.0},
            "settings": {"backend": "cpu", "seed": 9},
        }))
        config = load_config(str(path))
        assert isinstance(config, SimulationConfig)
        assert config.standard.viscosity == 50.0
        assert config.standard.mass == 2.5
        assert config.viscoelastic.substeps == 10
        assert config.settings.backend == "cpu"
        assert config.settings.seed == 9

    def test_empty_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")
        config = load_config(str(path))
        assert config.settings == SolverSettings()

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_config(str(path))

    def test_unknown_section(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"render": {}}))
        with pytest.raises(ConfigurationError, match="render"):
            load_config(str(path))

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"viscoelastic": {"fps": 0}}))
        with pytest.raises(ConfigurationError, match="fps"):
            load_config(str(path))
