# ================================================================================
# Page Scripts
# ================================================================================
#
# JavaScript snippets evaluated against element handles and pages.
#
# Element scripts are written as arrow functions so they can be passed to
# `ElementHandle.evaluate(script, arg)`; the handle is the first parameter.
#
# ================================================================================

# Nudge an element into view before checking its geometry
SCROLL_INTO_VIEW = "el => el.scrollIntoView(true)"

# Centre the element in the viewport (used before programmatic actions)
SCROLL_INTO_VIEW_CENTER = (
    "el => el.scrollIntoView({block: 'center', inline: 'center'})"
)

# Rendered visibility: non-zero box, visible and displayed
IS_RENDERED_VISIBLE = """
el => {
    const rect = el.getBoundingClientRect();
    const style = window.getComputedStyle(el);
    return rect.width > 0 && rect.height > 0
        && style.visibility === 'visible'
        && style.display !== 'none';
}
"""

# Live DOM property when scalar, HTML attribute otherwise
READ_ATTRIBUTE = """
(el, name) => {
    const prop = el[name];
    if (prop !== undefined && prop !== null
            && typeof prop !== 'object' && typeof prop !== 'function') {
        return String(prop);
    }
    return el.getAttribute(name);
}
"""

# Programmatic click, bypasses hit-testing
PROGRAMMATIC_CLICK = "el => el.click()"

# Set value through the native setter so framework-managed inputs see it,
# then emit the events a real keystroke would
SET_VALUE_AND_NOTIFY = """
(el, value) => {
    const proto = Object.getPrototypeOf(el);
    const descriptor = Object.getOwnPropertyDescriptor(proto, 'value');
    if (descriptor && descriptor.set) {
        descriptor.set.call(el, value);
    } else {
        el.value = value;
    }
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
}
"""

# Page-level scripts
DOCUMENT_READY_STATE = "() => document.readyState"
JQUERY_ACTIVE_REQUESTS = "() => window.jQuery ? window.jQuery.active : 0"
SCROLL_HEIGHT = "() => document.body.scrollHeight"
VIEWPORT_HEIGHT = "() => window.innerHeight"
SCROLL_TO_Y = "y => window.scrollTo(0, y)"

# False once the node has been removed from the document
IS_CONNECTED = "el => el.isConnected"
