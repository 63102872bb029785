import pytest
from unittest.mock import MagicMock, patch
from inkflow import app


@pytest.fixture
def mock_glfw():
    """Provides a mocked glfw module."""
    with patch("inkflow.app.glfw") as mock:
        mock.init.return_value = True
        mock.get_primary_monitor.return_value = MagicMock()
        mock.get_video_mode.return_value = MagicMock(
            size=MagicMock(width=1920, height=1080)
        )
        mock.create_window.return_value = MagicMock()
        mock.get_framebuffer_size.return_value = (32, 24)
        mock.get_window_size.return_value = (32, 24)
        # Simulate a few frames and then exit
        mock.window_should_close.side_effect = [False, False, False, True]
        yield mock


@pytest.fixture
def mock_moderngl():
    """Provides a mocked moderngl module."""
    with patch("inkflow.app.moderngl") as mock:
        mock.create_context.return_value = MagicMock()
        yield mock


def test_app_main_gpu_backend(mock_glfw, mock_moderngl):
    with patch("inkflow.app.GpuPipeline") as mock_sim:
        app.main([])
        mock_sim.assert_called_once()
        _, cfg, w, h = mock_sim.call_args[0]
        assert cfg.backend == "gpu"
        assert (w, h) == (32, 24)
        assert mock_sim.return_value.tick.call_count == 3
    assert mock_glfw.poll_events.call_count == 3
    assert mock_glfw.swap_buffers.call_count == 3
    mock_glfw.terminate.assert_called_once()


def test_app_main_cpu_backend_runs_numpy_pipeline(mock_glfw, mock_moderngl):
    with patch("inkflow.app.GpuPipeline") as mock_gpu, patch(
        "inkflow.app.FramePresenter"
    ) as mock_presenter:
        app.main(["--backend", "cpu"])
        mock_gpu.assert_not_called()
        presenter = mock_presenter.return_value
        assert presenter.upload.call_count == 3
        frame = presenter.upload.call_args[0][0]
        assert frame.shape == (24, 32, 4)
        assert presenter.show.call_count == 3


def test_app_feeds_pointer_events(mock_glfw, mock_moderngl):
    with patch("inkflow.app.GpuPipeline") as mock_sim:
        def fire_events():
            on_cursor = mock_glfw.set_cursor_pos_callback.call_args[0][1]
            on_cursor(None, 8, 6)
            on_cursor(None, 16, 12)

        mock_glfw.poll_events.side_effect = fire_events
        app.main([])
        pointer, prev, elapsed = mock_sim.return_value.tick.call_args[0]
        assert pointer.xy == pytest.approx((0.5, 0.5))
        assert prev.xy == pytest.approx((0.25, 0.75))
        assert pointer.active and prev.active


def test_app_pointer_leave(mock_glfw, mock_moderngl):
    with patch("inkflow.app.GpuPipeline") as mock_sim:
        def fire_events():
            mock_glfw.set_cursor_pos_callback.call_args[0][1](None, 16, 12)
            mock_glfw.set_cursor_enter_callback.call_args[0][1](None, False)

        mock_glfw.poll_events.side_effect = fire_events
        app.main([])
        pointer, prev, _ = mock_sim.return_value.tick.call_args[0]
        assert not pointer.active
        assert pointer.xy == (0.0, 0.0)


def test_app_resize_reallocates(mock_glfw, mock_moderngl):
    with patch("inkflow.app.GpuPipeline") as mock_sim:
        mock_glfw.poll_events.side_effect = lambda: mock_glfw.set_framebuffer_size_callback.call_args[0][1](None, 80, 60)
        app.main([])
        mock_sim.return_value.resize.assert_called_with(80, 60)


def test_app_glfw_failure(mock_glfw, mock_moderngl):
    mock_glfw.init.return_value = False
    with pytest.raises(RuntimeError):
        app.main([])


def test_app_context_failure_terminates(mock_glfw, mock_moderngl):
    mock_moderngl.create_context.side_effect = Exception("no GL")
    with pytest.raises(Exception, match="no GL"):
        app.main([])
    mock_glfw.terminate.assert_called_once()
