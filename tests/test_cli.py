import pytest
from unittest.mock import patch

from inkflow.app import build_parser, config_from_args, main
from inkflow.config import AppConfig
from inkflow.logging import setup_logging

def test_cli_defaults_match_config():
    cfg = config_from_args(build_parser().parse_args([]))
    assert cfg == AppConfig()

def test_cli_args_override_config():
    args = build_parser().parse_args(
        [
            "--backend",
            "cpu",
            "--fullscreen",
            "--sim-scale",
            "0.5",
            "--pixelated",
            "--pixel-size",
            "6",
            "--invert",
            "--vorticity",
            "0.1",
            "--viscosity",
            "0.7",
            "--log-level",
            "DEBUG",
            "--log-file",
            "test.log",
            "--debug",
        ]
    )
    cfg = config_from_args(args)
    assert cfg.backend == "cpu"
    assert cfg.fullscreen is True
    assert cfg.sim_scale == 0.5
    assert cfg.pixelated is True
    assert cfg.pixel_size == 6.0
    assert cfg.invert_colors is True
    assert cfg.vorticity_threshold == 0.1
    assert cfg.viscosity_threshold == 0.7
    assert cfg.log_level == "DEBUG"
    assert cfg.log_file == "test.log"
    assert cfg.debug is True

def test_cli_sim_scale_is_clamped():
    cfg = config_from_args(build_parser().parse_args(["--sim-scale", "3"]))
    assert cfg.sim_scale == 1.0

def test_cli_rejects_out_of_range_vorticity():
    with pytest.raises(SystemExit) as e:
        main(["--vorticity", "0.9"])
    assert e.value.code == 2


def test_cli_args_smoke_test(tmp_path):
    """Test that CLI arguments reach the pipeline config without crashing."""
    log_file = str(tmp_path / "inkflow.log")
    with patch("inkflow.app.glfw") as mock_glfw, patch(
        "inkflow.app.moderngl"
    ), patch("inkflow.app.GpuPipeline") as mock_gpu_pipeline, patch(
        "inkflow.app.FramePresenter"
    ):
        mock_glfw.init.return_value = True
        mock_glfw.get_framebuffer_size.return_value = (320, 180)
        # Prevent the main loop from running
        mock_glfw.window_should_close.return_value = True

        try:
            main(["--pixelated", "--invert", "--log-file", log_file, "--vorticity", "0.2"])
        finally:
            setup_logging("INFO")

    mock_gpu_pipeline.assert_called_once()
    config = mock_gpu_pipeline.call_args[0][1]
    assert isinstance(config, AppConfig)
    assert config.pixelated is True
    assert config.invert_colors is True
    assert config.log_file == log_file
    assert config.vorticity_threshold == 0.2
    assert mock_gpu_pipeline.call_args[0][2:] == (320, 180)
    mock_glfw.swap_interval.assert_called_once_with(1)
