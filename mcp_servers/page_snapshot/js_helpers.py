"""
JavaScript function declarations injected into pages.

Functions meant for Runtime.callFunctionOn receive the target element as `this`.
"""

from __future__ import annotations

# Rich editors keep their text in a JS model; these are the focusable inputs the
# accessibility tree exposes for each of them. Order is the detection priority.
EDITOR_INPUT_SELECTORS: tuple[tuple[str, str], ...] = (
    ("monaco", ".monaco-editor textarea"),
    ("codemirror", ".cm-editor .cm-content, .CodeMirror textarea"),
    ("ace", ".ace_editor textarea.ace_text-input, .ace_editor textarea"),
)

# Elements that can surface as named AX nodes. A zero-area match with no painted
# descendant is invisible to the user and gets dropped from snapshots.
ZERO_SIZE_CANDIDATES = "a[href], button, input, select, textarea, img, svg, iframe, [role], [tabindex], [aria-label]"
ZERO_SIZE_MARK = "zero-size"

# Returns a flat [element, mark, element, mark, ...] array: editor inputs tagged
# with their editor kind first, then zero-area elements tagged ZERO_SIZE_MARK.
PAGE_SCAN_JS = r"""
function (selectors, zeroSelector, zeroMark) {
  const out = [];
  const seen = new Set();
  for (const [kind, selector] of selectors) {
    let nodes = [];
    try { nodes = document.querySelectorAll(selector); } catch (e) { continue; }
    for (const el of nodes) {
      if (seen.has(el)) continue;
      seen.add(el);
      out.push(el, kind);
      if (out.length >= 200) break;
    }
  }
  const hasArea = (el) => {
    const r = el.getBoundingClientRect();
    return r.width > 0 && r.height > 0;
  };
  let candidates = [];
  try { candidates = document.querySelectorAll(zeroSelector); } catch (e) { return out; }
  let zero = 0;
  for (const el of candidates) {
    if (zero >= 500) break;
    if (seen.has(el) || hasArea(el)) continue;
    // No boxes at all: display:none (already hidden in the AX tree) or display:contents.
    if (el.getClientRects().length === 0) continue;
    let painted = false;
    for (const child of el.querySelectorAll('*')) {
      if (hasArea(child)) { painted = true; break; }
    }
    if (painted) continue;
    seen.add(el);
    out.push(el, zeroMark);
    zero += 1;
  }
  return out;
}
"""

IS_CONNECTED_JS = "function () { return !!(this && this.isConnected); }"

FILL_JS = r"""
function (value) {
  const el = this;
  const tag = (el.tagName || '').toLowerCase();
  const blocked = new Set(['checkbox', 'radio', 'button', 'submit', 'reset', 'image', 'file', 'hidden', 'range', 'color']);
  const isText = (tag === 'input' && !blocked.has((el.type || 'text').toLowerCase())) || tag === 'textarea';
  if (!isText && tag !== 'select' && !el.isContentEditable) {
    return { ok: false, reason: 'not_input', tag };
  }
  if (el.disabled || el.readOnly) {
    return { ok: false, reason: 'disabled', tag };
  }
  try { el.focus({ preventScroll: false }); } catch (e) {}
  if (el.isContentEditable && !isText && tag !== 'select') {
    el.textContent = value;
  } else {
    const proto = tag === 'textarea' ? HTMLTextAreaElement.prototype
      : tag === 'select' ? HTMLSelectElement.prototype
      : HTMLInputElement.prototype;
    const desc = Object.getOwnPropertyDescriptor(proto, 'value');
    if (desc && desc.set) desc.set.call(el, value); else el.value = value;
  }
  el.dispatchEvent(new Event('input', { bubbles: true }));
  el.dispatchEvent(new Event('change', { bubbles: true }));
  return { ok: true, tag };
}
"""

READ_MONACO_JS = r"""
function () {
  const host = this.closest && this.closest('.monaco-editor');
  const monaco = globalThis.monaco;
  if (!host || !monaco || !monaco.editor) return null;
  const editors = typeof monaco.editor.getEditors === 'function' ? monaco.editor.getEditors() : [];
  for (const ed of editors) {
    const dom = typeof ed.getContainerDomNode === 'function' ? ed.getContainerDomNode() : null;
    if (dom && (dom === host || dom.contains(host) || host.contains(dom))) return String(ed.getValue());
  }
  const models = typeof monaco.editor.getModels === 'function' ? monaco.editor.getModels() : [];
  return models.length === 1 ? String(models[0].getValue()) : null;
}
"""

READ_CODEMIRROR_JS = r"""
function () {
  const cm6 = this.closest && this.closest('.cm-editor');
  if (cm6) {
    const content = cm6.querySelector('.cm-content');
    const view = content && content.cmView && content.cmView.view;
    if (view && view.state && view.state.doc) return String(view.state.doc.toString());
    return null;
  }
  const cm5 = this.closest && this.closest('.CodeMirror');
  if (cm5 && cm5.CodeMirror && typeof cm5.CodeMirror.getValue === 'function') {
    return String(cm5.CodeMirror.getValue());
  }
  return null;
}
"""

READ_ACE_JS = r"""
function () {
  const host = this.closest && this.closest('.ace_editor');
  if (!host) return null;
  if (host.env && host.env.editor && typeof host.env.editor.getValue === 'function') {
    return String(host.env.editor.getValue());
  }
  const ace = globalThis.ace;
  if (ace && typeof ace.edit === 'function') {
    try { return String(ace.edit(host).getValue()); } catch (e) { return null; }
  }
  return null;
}
"""

READ_PLAIN_INPUT_JS = r"""
function () {
  const tag = (this.tagName || '').toLowerCase();
  if (tag === 'input' || tag === 'textarea' || tag === 'select') return String(this.value == null ? '' : this.value);
  return null;
}
"""

__all__ = [
    "EDITOR_INPUT_SELECTORS",
    "FILL_JS",
    "IS_CONNECTED_JS",
    "PAGE_SCAN_JS",
    "READ_ACE_JS",
    "READ_CODEMIRROR_JS",
    "READ_MONACO_JS",
    "READ_PLAIN_INPUT_JS",
    "ZERO_SIZE_CANDIDATES",
    "ZERO_SIZE_MARK",
]
