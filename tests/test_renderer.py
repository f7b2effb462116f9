# FILE: tests/test_renderer.py
"""
Tests for uigen/preview/renderer.py
Sandboxed evaluation through the embedded interpreter: render count,
hooks, scope resolution, error containment and outcome caching.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from uigen.generation.normalizer import FALLBACK_UNIT, normalize_output
from uigen.preview.renderer import (
    INTERPRETER_GLOBALS,
    RENDER_HELPER,
    SHADOWED_GLOBALS,
    RenderOutcome,
    RenderState,
    SandboxRenderer,
    build_program,
    load_runtime,
    unit_parameters,
)


COUNTER = """function Counter() {
  const [count, setCount] = useState(2);
  return <button style={{ padding: 8, fontWeight: 600 }} onClick={() => setCount(count + 1)}>Count: {count}</button>;
}

render(<Counter />);"""

LOADER = """function Loader() {
  const [ready, setReady] = useState(false);
  useEffect(() => { setReady(true); }, []);
  return <p>{ready ? 'ready' : 'loading'}</p>;
}

render(<Loader />);"""

CHART_D3 = """function Chart() {
  const x = d3.scaleLinear().domain([0, 10]).range([0, 100]);
  return <div>{x(5)}</div>;
}

render(<Chart />);"""


@pytest.fixture
def renderer():
    return SandboxRenderer()


# =============================================================================
# PROGRAM ASSEMBLY
# =============================================================================

class TestBuildProgram:
    """Wrapper function parameters are exactly the scope + render + shadows."""

    def test_scope_symbols_are_parameters(self, restricted):
        program = build_program("/* unit */", restricted)
        header = program.rsplit("(function (", 1)[1].split(")", 1)[0]
        params = [p.strip() for p in header.split(",")]
        for name in restricted.names():
            assert name in params
        assert RENDER_HELPER in params

    def test_interpreter_globals_shadowed(self, restricted):
        program = build_program("/* unit */", restricted)
        header = program.rsplit("(function (", 1)[1].split(")", 1)[0]
        params = [p.strip() for p in header.split(",")]
        for name in SHADOWED_GLOBALS:
            assert name in params

    def test_unit_parameters_match_header(self, expanded):
        program = build_program("/* unit */", expanded)
        header = program.rsplit("(function (", 1)[1].split(")", 1)[0]
        assert [p.strip() for p in header.split(",")] == unit_parameters(expanded)

    def test_interpreter_globals_scrubbed(self, restricted):
        program = build_program("/* unit */", restricted)
        assert "delete __previewGlobal[name]" in program
        for name in INTERPRETER_GLOBALS:
            assert f'"{name}"' in program
        assert program.rstrip().endswith("})(this);")

    def test_expanded_library_not_in_restricted_program(self, restricted):
        program = build_program("/* unit */", restricted)
        assert "__preview.libs.d3" not in program

    def test_max_passes_forwarded(self, restricted):
        program = build_program("/* unit */", restricted, max_passes=3)
        assert '{"maxPasses": 3}' in program

    def test_runtime_loads(self):
        assert "function __previewRuntime" in load_runtime()


# =============================================================================
# SUCCESSFUL RENDERS
# =============================================================================

class TestRenderSuccess:
    """Units that should evaluate to static HTML."""

    def test_counter_renders(self, renderer, restricted):
        outcome = renderer.render(COUNTER, restricted)

        assert outcome.success is True, outcome.error
        assert outcome.output == '<button style="padding:8px;font-weight:600">Count: 2</button>'
        assert outcome.renders == 1
        assert outcome.scope_name == "restricted"
        assert renderer.state == RenderState.RENDERED

    def test_effect_state_update_rerenders(self, renderer, restricted):
        outcome = renderer.render(LOADER, restricted)

        assert outcome.success is True, outcome.error
        assert outcome.output == "<p>ready</p>"
        assert outcome.passes == 2

    def test_text_is_escaped(self, renderer, restricted):
        unit = "function A() { return <p>{'<b>&'}</p>; }\n\nrender(<A />);"
        outcome = renderer.render(unit, restricted)
        assert outcome.output == "<p>&lt;b&gt;&amp;</p>"

    def test_class_name_becomes_class(self, renderer, restricted):
        unit = 'function A() { return <div className="box" htmlFor="x" />; }\n\nrender(<A />);'
        outcome = renderer.render(unit, restricted)
        assert 'class="box"' in outcome.output
        assert 'for="x"' in outcome.output

    def test_icon_renders_svg(self, renderer, restricted):
        unit = "function A() { return <Home size={16} />; }\n\nrender(<A />);"
        outcome = renderer.render(unit, restricted)

        assert outcome.success is True, outcome.error
        assert outcome.output.startswith("<svg")
        assert 'data-icon="Home"' in outcome.output
        assert 'width="16"' in outcome.output
        assert 'stroke-width="2"' in outcome.output

    def test_console_is_captured(self, renderer, restricted):
        unit = "console.log('hello', { a: 1 });\nfunction A() { return <i />; }\n\nrender(<A />);"
        outcome = renderer.render(unit, restricted)
        assert outcome.logs == ('[log] hello {"a":1}',)

    def test_timers_never_fire(self, renderer, restricted):
        unit = """function A() {
  const [n, setN] = useState(0);
  useEffect(() => {
    const id = setInterval(() => setN(n + 1), 10);
    return () => clearInterval(id);
  }, []);
  return <span>{n}</span>;
}

render(<A />);"""
        outcome = renderer.render(unit, restricted)
        assert outcome.output == "<span>0</span>"
        assert outcome.passes == 1

    def test_class_component(self, renderer, restricted):
        unit = """class Clock extends React.Component {
  constructor(props) {
    super(props);
    this.state = { t: 1 };
  }
  render() {
    return <p>tick {this.state.t}</p>;
  }
}

render(<Clock />);"""
        outcome = renderer.render(unit, restricted)
        assert outcome.success is True, outcome.error
        assert outcome.output == "<p>tick 1</p>"

    def test_interpreter_globals_are_undefined(self, renderer, restricted):
        unit = "function A() { return <p>{typeof require}-{typeof dukpy}</p>; }\n\nrender(<A />);"
        outcome = renderer.render(unit, restricted)
        assert outcome.output == "<p>undefined-undefined</p>"

    def test_global_object_does_not_expose_interpreter(self, renderer, restricted):
        unit = """function A() {
  var g = Function('return this')();
  return <div>{typeof g.__preview}|{typeof g.dukpy}|{typeof g.__previewRuntime}|{typeof g.call_python}</div>;
}

render(<A />);"""
        outcome = renderer.render(unit, restricted)
        assert outcome.success is True, outcome.error
        assert outcome.output == "<div>undefined|undefined|undefined|undefined</div>"

    def test_inline_legacy_mount_after_normalizing(self, renderer, restricted):
        raw = "function App() { return <h1>Hi</h1>; } ReactDOM.render(<App />, document.getElementById('root'));"
        outcome = renderer.render(normalize_output(raw).code, restricted)
        assert outcome.success is True, outcome.error
        assert outcome.output == "<h1>Hi</h1>"

    def test_fallback_unit_renders(self, renderer, restricted):
        outcome = renderer.render(FALLBACK_UNIT, restricted)
        assert outcome.success is True, outcome.error
        assert "Preview unavailable" in outcome.output


# =============================================================================
# SCOPES
# =============================================================================

class TestScopeResolution:
    """Symbols resolve only when the selected scope provides them."""

    def test_restricted_rejects_d3(self, renderer, restricted):
        outcome = renderer.render(CHART_D3, restricted)

        assert outcome.success is False
        assert "d3" in outcome.error
        assert renderer.state == RenderState.ERRORED

    def test_expanded_resolves_d3(self, renderer, expanded):
        outcome = renderer.render(CHART_D3, expanded)
        assert outcome.success is True, outcome.error
        assert outcome.output == "<div>50</div>"

    def test_expanded_recharts_placeholder(self, renderer, expanded):
        unit = """function Sales() {
  const data = [{ m: 'Jan', v: 3 }, { m: 'Feb', v: 5 }];
  return (
    <ResponsiveContainer width="100%" height={200}>
      <LineChart data={data}>
        <Line dataKey="v" />
      </LineChart>
    </ResponsiveContainer>
  );
}

render(<Sales />);"""
        outcome = renderer.render(unit, expanded)

        assert outcome.success is True, outcome.error
        assert 'data-chart="LineChart"' in outcome.output
        assert 'data-points="2"' in outcome.output
        assert 'data-key="v"' in outcome.output

    def test_expanded_libraries_headless(self, renderer, expanded):
        unit = """function Scene() {
  const mount = useRef(null);
  useEffect(() => {
    const scene = new THREE.Scene();
    const camera = new THREE.PerspectiveCamera(75, 1, 0.1, 1000);
    const renderer = new THREE.WebGLRenderer({ antialias: true });
    renderer.setSize(200, 200);
    mount.current.appendChild(renderer.domElement);
    const cube = new THREE.Mesh(new THREE.BoxGeometry(1, 1, 1), new THREE.MeshStandardMaterial({ color: 0x00ff00 }));
    scene.add(cube);
    renderer.render(scene, camera);
    const id = requestAnimationFrame(() => {});
    return () => cancelAnimationFrame(id);
  }, []);
  const total = _.sum([1, 2, 3]);
  const synth = new Tone.Synth().toDestination();
  return <div ref={mount}>{total}</div>;
}

render(<Scene />);"""
        outcome = renderer.render(unit, expanded)
        assert outcome.success is True, outcome.error
        assert outcome.output == "<div>6</div>"

    def test_context_only_in_expanded(self, renderer, restricted, expanded):
        unit = """const Theme = createContext('light');
function Label() {
  const theme = useContext(Theme);
  return <b>{theme}</b>;
}
function App() {
  return <Theme.Provider value="dark"><Label /></Theme.Provider>;
}

render(<App />);"""
        assert renderer.render(unit, expanded).output == "<b>dark</b>"
        assert SandboxRenderer().render(unit, restricted).success is False


# =============================================================================
# FAILURES
# =============================================================================

class TestRenderFailures:
    """Every failure becomes an unsuccessful outcome; nothing raises."""

    def test_syntax_error_contained(self, renderer, restricted):
        outcome = renderer.render("function Broken( { return <div> }\n\nrender(<Broken />);", restricted)
        assert outcome.success is False
        assert outcome.error

    def test_missing_render_call(self, renderer, restricted):
        outcome = renderer.render("function A() { return <div />; }", restricted)
        assert outcome.success is False
        assert "never called render()" in outcome.error

    def test_double_render_call(self, renderer, restricted):
        unit = "function A() { return <div />; }\nrender(<A />);\nrender(<A />);"
        outcome = renderer.render(unit, restricted)
        assert outcome.success is False
        assert "2 times" in outcome.error

    def test_component_throw_contained(self, renderer, restricted):
        unit = "function A() { throw new Error('boom'); }\n\nrender(<A />);"
        outcome = renderer.render(unit, restricted)
        assert outcome.success is False
        assert "boom" in outcome.error

    def test_endless_loop_times_out(self, restricted):
        unit = "function App() { while (true) {} return <div />; }\n\nrender(<App />);"
        outcome = SandboxRenderer(timeout_seconds=1.0).render(unit, restricted)

        assert outcome.success is False
        assert "did not finish" in outcome.error

        # The worker is replaced; later evaluations still run.
        assert SandboxRenderer().render(COUNTER, restricted).success is True

    def test_object_child_rejected(self, renderer, restricted):
        unit = "function A() { return <div>{{ a: 1 }}</div>; }\n\nrender(<A />);"
        outcome = renderer.render(unit, restricted)
        assert outcome.success is False
        assert "Objects are not valid" in outcome.error


# =============================================================================
# CACHING / STATE
# =============================================================================

class TestRendererState:
    """Outcome caching and state transitions."""

    def test_initial_state(self, renderer):
        assert renderer.state == RenderState.IDLE
        assert renderer.outcome is None

    def test_same_unit_same_scope_cached(self, renderer, restricted):
        first = renderer.render(COUNTER, restricted)
        second = renderer.render(COUNTER, restricted)
        assert second is first

    def test_scope_change_reevaluates(self, renderer, restricted, expanded):
        first = renderer.render(COUNTER, restricted)
        second = renderer.render(COUNTER, expanded)
        assert second is not first
        assert second.scope_name == "expanded"

    def test_failure_replaces_previous_outcome(self, renderer, restricted):
        renderer.render(COUNTER, restricted)
        failed = renderer.render(CHART_D3, restricted)
        assert renderer.outcome is failed
        assert renderer.state == RenderState.ERRORED

    @pytest.mark.asyncio
    async def test_evaluate_async_does_not_commit(self, renderer, restricted):
        outcome = await renderer.evaluate_async(COUNTER, restricted)

        assert outcome.success is True, outcome.error
        assert renderer.outcome is None
        assert renderer.state == RenderState.IDLE

        renderer.commit(COUNTER, restricted, outcome)
        assert renderer.state == RenderState.RENDERED
        assert await renderer.evaluate_async(COUNTER, restricted) is outcome

    def test_state_while_evaluating(self, renderer):
        renderer._evaluating = 1
        assert renderer.state == RenderState.EVALUATING

    def test_outcome_to_dict(self):
        outcome = RenderOutcome(success=True, output="<i></i>", logs=("[log] x",), renders=1, scope_name="restricted")
        data = outcome.to_dict()
        assert data["scope"] == "restricted"
        assert data["logs"] == ["[log] x"]
        assert data["error"] is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
