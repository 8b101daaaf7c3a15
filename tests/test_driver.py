import sys
import types

import pytest

import query2_info


class _FakeGlfw(types.ModuleType):
    VISIBLE = 0x00020004
    FALSE = 0

    def __init__(self, init_ok=True, window="window", extensions=()):
        super().__init__("glfw")
        self.init_ok = init_ok
        self.window = window
        self.extensions = set(extensions)
        self.calls: list[str] = []
        self.hints: list[tuple[int, int]] = []

    def init(self):
        self.calls.append("init")
        return self.init_ok

    def window_hint(self, hint, value):
        self.hints.append((hint, value))

    def create_window(self, width, height, title, monitor, share):
        self.calls.append("create")
        return self.window

    def make_context_current(self, window):
        self.calls.append("current")

    def destroy_window(self, window):
        self.calls.append("destroy")

    def terminate(self):
        self.calls.append("terminate")

    def extension_supported(self, name):
        return name in self.extensions


class _NullFunction:
    """Unresolved PyOpenGL symbol: present but falsy."""

    def __bool__(self) -> bool:
        return False


class _FakeOpenGL(types.ModuleType):
    def __init__(self, gl):
        super().__init__("OpenGL")
        self.ERROR_CHECKING = True
        self.error_checking_at_load = None
        self._gl = gl

    @property
    def GL(self):
        self.error_checking_at_load = self.ERROR_CHECKING
        return self._gl


def _fake_gl(**overrides):
    functions = {
        "glGetInternalformativ": lambda *args: None,
        "glGetInternalformati64v": lambda *args: None,
        "glGetError": lambda: query2_info.GL_ENUMS["GL_INVALID_ENUM"],
    }
    functions.update(overrides)
    return types.SimpleNamespace(**functions)


@pytest.fixture
def install_gl(monkeypatch: pytest.MonkeyPatch):
    def _install(glfw=None, opengl=None):
        monkeypatch.setitem(sys.modules, "glfw", glfw)
        monkeypatch.setitem(sys.modules, "OpenGL", opengl)

    return _install


def test_open_reports_missing_glfw(install_gl) -> None:
    install_gl(glfw=None, opengl=_FakeOpenGL(_fake_gl()))

    with pytest.raises(query2_info.ContextError, match="glfw is not available"):
        query2_info.GLDriver().open()


def test_open_reports_glfw_init_failure(install_gl) -> None:
    glfw = _FakeGlfw(init_ok=False)
    install_gl(glfw=glfw, opengl=_FakeOpenGL(_fake_gl()))

    with pytest.raises(query2_info.ContextError, match="Error initializing glfw."):
        query2_info.GLDriver().open()

    assert glfw.calls == ["init"]


def test_open_terminates_glfw_when_window_creation_fails(install_gl) -> None:
    glfw = _FakeGlfw(window=None)
    install_gl(glfw=glfw, opengl=_FakeOpenGL(_fake_gl()))

    with pytest.raises(query2_info.ContextError, match="Error creating glfw window."):
        query2_info.GLDriver().open()

    assert glfw.calls == ["init", "create", "terminate"]
    assert glfw.hints == [(glfw.VISIBLE, glfw.FALSE)]


def test_open_closes_window_when_pyopengl_is_missing(install_gl) -> None:
    glfw = _FakeGlfw()
    install_gl(glfw=glfw, opengl=None)
    driver = query2_info.GLDriver()

    with pytest.raises(query2_info.ContextError, match="PyOpenGL is not available"):
        driver.open()

    assert glfw.calls == ["init", "create", "current", "destroy", "terminate"]
    driver.close()
    assert glfw.calls[-1] == "terminate"
    assert glfw.calls.count("terminate") == 1


def test_open_disables_pyopengl_error_checking_before_loading_gl(install_gl) -> None:
    opengl = _FakeOpenGL(_fake_gl())
    install_gl(glfw=_FakeGlfw(), opengl=opengl)

    query2_info.GLDriver().open()

    assert opengl.error_checking_at_load is False


def test_open_driver_resolves_entry_points_and_polls_errors(install_gl) -> None:
    gl = _fake_gl()
    glfw = _FakeGlfw(extensions=(query2_info.EXTENSION_NAME,))
    install_gl(glfw=glfw, opengl=_FakeOpenGL(gl))
    driver = query2_info.GLDriver()
    driver.open()

    assert driver.has_extension(query2_info.EXTENSION_NAME) is True
    assert driver.has_extension("GL_ARB_not_there") is False
    assert driver.entry_point(query2_info.WIDTH_32) is gl.glGetInternalformativ
    assert driver.entry_point(query2_info.WIDTH_64) is gl.glGetInternalformati64v
    assert driver.get_error() == query2_info.GL_ENUMS["GL_INVALID_ENUM"]

    driver.close()

    assert glfw.calls[-2:] == ["destroy", "terminate"]
    with pytest.raises(query2_info.ContextError, match="not open"):
        driver.get_error()


def test_null_entry_point_raises_context_error(install_gl) -> None:
    install_gl(
        glfw=_FakeGlfw(),
        opengl=_FakeOpenGL(_fake_gl(glGetInternalformati64v=_NullFunction())),
    )
    driver = query2_info.GLDriver()
    driver.open()

    with pytest.raises(
        query2_info.ContextError, match="glGetInternalformati64v is not available."
    ):
        driver.entry_point(query2_info.WIDTH_64)
    assert driver.entry_point(query2_info.WIDTH_32) is not None


def test_main_exits_one_without_query2_extension_on_real_driver(
    install_gl, capsys
) -> None:
    glfw = _FakeGlfw(extensions=())
    install_gl(glfw=glfw, opengl=_FakeOpenGL(_fake_gl()))

    with pytest.raises(SystemExit) as exc_info:
        query2_info.main([])

    assert exc_info.value.code == 1
    assert glfw.calls == ["init", "create", "current", "destroy", "terminate"]
    assert "GL_ARB_internalformat_query2 extension not found" in capsys.readouterr().err


def test_gl_driver_requires_open_context() -> None:
    driver = query2_info.GLDriver()

    with pytest.raises(query2_info.ContextError, match="not open"):
        driver.entry_point(query2_info.WIDTH_64)
    with pytest.raises(query2_info.ContextError, match="not open"):
        driver.get_error()


def test_gl_driver_close_without_open_is_noop() -> None:
    driver = query2_info.GLDriver()

    driver.close()
    driver.close()


def test_require_extension_accepts_query2(make_driver) -> None:
    query2_info.require_extension(make_driver())


def test_require_extension_rejects_missing_extension(make_driver) -> None:
    with pytest.raises(query2_info.ContextError) as exc_info:
        query2_info.require_extension(make_driver(extensions=()))

    assert str(exc_info.value) == "GL_ARB_internalformat_query2 extension not found"


def test_check_gl_error_without_errors(make_driver, capsys) -> None:
    assert query2_info.check_gl_error(make_driver(), "anywhere") is False
    assert capsys.readouterr().err == ""


def test_check_gl_error_drains_every_pending_error(make_driver, capsys) -> None:
    driver = make_driver()
    driver.pending_errors = [
        query2_info.GL_ENUMS["GL_INVALID_VALUE"],
        query2_info.GL_ENUMS["GL_OUT_OF_MEMORY"],
    ]

    assert query2_info.check_gl_error(driver, "setup") is True

    assert capsys.readouterr().err.splitlines() == [
        "gl_error in setup: GL_INVALID_VALUE",
        "gl_error in setup: GL_OUT_OF_MEMORY",
    ]
    assert driver.pending_errors == []


def test_main_exits_one_when_extension_is_missing(
    make_driver, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    driver = make_driver(extensions=())
    monkeypatch.setattr(query2_info, "GLDriver", lambda: driver)

    with pytest.raises(SystemExit) as exc_info:
        query2_info.main([])

    assert exc_info.value.code == 1
    assert driver.opened is True
    assert driver.closed is True
    assert "GL_ARB_internalformat_query2 extension not found" in capsys.readouterr().err


def test_main_exits_one_when_context_cannot_be_opened(
    monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    class _BrokenDriver:
        closed = False

        def open(self) -> None:
            raise query2_info.ContextError("Error creating glfw window.")

        def close(self) -> None:
            self.closed = True

    broken = _BrokenDriver()
    monkeypatch.setattr(query2_info, "GLDriver", lambda: broken)

    with pytest.raises(SystemExit) as exc_info:
        query2_info.main(["-f"])

    assert exc_info.value.code == 1
    assert broken.closed is True
    assert "Error: Error creating glfw window." in capsys.readouterr().err


def test_main_runs_queries_and_closes_driver(
    make_driver, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    driver = make_driver(default=[1])
    monkeypatch.setattr(query2_info, "GLDriver", lambda: driver)

    query2_info.main(["-pname", "GL_MIPMAP", "-b"])

    lines = capsys.readouterr().out.splitlines()
    per_width = len(query2_info.VALID_TARGETS) * len(query2_info.VALID_INTERNALFORMATS)
    assert len(lines) == 2 * per_width
    assert lines[0] == '32 bit, GL_MIPMAP, GL_TEXTURE_1D, GL_DEPTH_COMPONENT, "GL_TRUE"'
    assert driver.closed is True


def test_main_reports_missing_entry_point(
    make_driver, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    driver = make_driver()

    def _entry_point(width: query2_info.QueryWidth):
        raise query2_info.ContextError(f"{width.entry_point} is not available.")

    driver.entry_point = _entry_point
    monkeypatch.setattr(query2_info, "GLDriver", lambda: driver)

    with pytest.raises(SystemExit) as exc_info:
        query2_info.main([])

    assert exc_info.value.code == 1
    assert "glGetInternalformati64v is not available." in capsys.readouterr().err
    assert driver.closed is True
