"""Tests for layer 6: quality hardening."""

from __future__ import annotations

from neurolint.layers.quality import (
    add_error_handling,
    add_fallback_render,
    add_loading_state,
    ensure_single_default_export,
    fix_interface_semicolons,
    transform,
)

UPLOADER = """\
export default function Uploader() {
  const send = (file) => fetch('/api/upload', { method: 'POST', body: file });
  return <input type="file" onChange={(e) => send(e.target.files[0])} />;
}"""


class TestFallbackRender:
    def test_wraps_high_risk_component(self) -> None:
        out = add_fallback_render(UPLOADER)
        assert "function UploaderWithErrorBoundary(props: any)" in out
        assert "export default function" not in out
        assert out.endswith("export default UploaderWithErrorBoundary;")

    def test_existing_boundary_untouched(self) -> None:
        code = UPLOADER + "\n// wrapped by ErrorBoundary in layout"
        assert add_fallback_render(code) == code

    def test_low_risk_untouched(self) -> None:
        code = "export default function Label() { return <span />; }"
        assert add_fallback_render(code) == code

    def test_identifier_containing_try_does_not_block(self) -> None:
        code = UPLOADER.replace("const send", "const retry = 3;\n  const send")
        assert "UploaderWithErrorBoundary" in add_fallback_render(code)

    def test_existing_try_block_untouched(self) -> None:
        code = UPLOADER.replace("return <input", "try { warm(); } finally {}\n  return <input")
        assert add_fallback_render(code) == code


class TestLoadingState:
    def test_adds_state_to_small_async_component(self) -> None:
        code = "function A() {\n  const [d, setD] = useState(null);\n  fetch('/x');\n}"
        out = add_loading_state(code)
        assert "const [isLoading, setIsLoading] = useState(false);\n  const [d, setD]" in out

    def test_large_component_untouched(self) -> None:
        code = "function A() {\n  const [d, setD] = useState(null);\n  fetch('/x');\n}" + (
            "\n// padding" * 40
        )
        assert add_loading_state(code) == code

    def test_existing_loading_untouched(self) -> None:
        code = "function A() {\n  const [loading, setLoading] = useState(true);\n  fetch('/x');\n}"
        assert add_loading_state(code) == code


class TestSingleDefaultExport:
    def test_adds_missing_export(self) -> None:
        assert ensure_single_default_export("function A() {}") == (
            "function A() {}\n\nexport default A;"
        )

    def test_keeps_last_statement(self) -> None:
        code = "function A() {}\nfunction B() {}\nexport default A;\nexport default B;"
        assert ensure_single_default_export(code) == (
            "function A() {}\nfunction B() {}\nexport default B;"
        )

    def test_declaration_wins(self) -> None:
        code = "export default function A() {}\nexport default A;"
        assert ensure_single_default_export(code) == "export default function A() {}"

    def test_nothing_to_export(self) -> None:
        assert ensure_single_default_export("const x = 1;") == "const x = 1;"

    def test_single_export_untouched(self) -> None:
        code = "export default function A() {}"
        assert ensure_single_default_export(code) == code


class TestTransform:
    def test_fixed_point(self) -> None:
        once = transform(UPLOADER)
        assert once.count("export default") == 1
        assert transform(once) == once


LOADER = """\
function Profile({ id }) {
  const load = async () => {
    const res = await api.get(`/users/${id}`);
    setUser(res.data);
  };
  return <button onClick={load}>Load</button>;
}"""


class TestErrorHandling:
    def test_wraps_async_arrow_body(self) -> None:
        assert add_error_handling(LOADER) == """\
function Profile({ id }) {
  const load = async () => {
    try {
      const res = await api.get(`/users/${id}`);
      setUser(res.data);
    } catch (error) {
      console.error("Error:", error);
    }
  };
  return <button onClick={load}>Load</button>;
}"""

    def test_fixed_point(self) -> None:
        once = add_error_handling(LOADER)
        assert add_error_handling(once) == once

    def test_existing_catch_untouched(self) -> None:
        code = LOADER.replace("setUser(res.data);", "setUser(res.data);\n    p.catch(log);")
        assert add_error_handling(code) == code

    def test_without_await_untouched(self) -> None:
        code = "const load = async () => {\n  return 1;\n};"
        assert add_error_handling(code) == code

    def test_single_line_arrow_untouched(self) -> None:
        code = "const load = async () => { await go(); };"
        assert add_error_handling(code) == code


class TestInterfaceSemicolons:
    def test_terminates_members(self) -> None:
        code = (
            "interface Props {\n  name: string\n  age?: number;\n"
            "  onPick: (id: string) => void\n}"
        )
        assert fix_interface_semicolons(code) == (
            "interface Props {\n  name: string;\n  age?: number;\n"
            "  onPick: (id: string) => void;\n}"
        )

    def test_commented_member_untouched(self) -> None:
        code = "interface Props {\n  name: string // display name\n}"
        assert fix_interface_semicolons(code) == code

    def test_nested_type_untouched(self) -> None:
        code = "interface Props {\n  user: { id: string }\n}"
        assert fix_interface_semicolons(code) == code

    def test_fixed_point(self) -> None:
        once = fix_interface_semicolons("interface A {\n  a: string\n  b: number\n}")
        assert fix_interface_semicolons(once) == once
