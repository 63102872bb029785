VS = """
#version 330
in vec2 in_vert;
out vec2 uv;
void main(){ gl_Position = vec4(in_vert,0.0,1.0); uv = (in_vert + 1.0)*0.5; }
"""

# One relaxation sweep: (vx, vy, density, curl) in, same layout out.
FS_RELAX = """
#version 330
in vec2 uv; out vec4 fragColor;
uniform sampler2D field;
uniform vec2 resolution;
uniform vec4 mouse;
uniform vec4 prev_mouse;
uniform float dt;
uniform float vorticity_threshold;
uniform float velocity_threshold;
uniform float viscosity_threshold;
uniform vec2 density_range;
uniform float density_k;
uniform float velocity_decay;
uniform float drag_scale;
uniform float drag_limit;
uniform float force_gain;
uniform float nudge_radius;
uniform float nudge_gain;
void main(){
    vec2 st = 1.0 / resolution;
    vec2 p = gl_FragCoord.xy / resolution;
    vec4 c  = texture(field, p);
    vec4 fr = texture(field, p + vec2(st.x, 0.0));
    vec4 fl = texture(field, p - vec2(st.x, 0.0));
    vec4 ft = texture(field, p + vec2(0.0, st.y));
    vec4 fd = texture(field, p - vec2(0.0, st.y));

    vec3 ddx = (fr - fl).xyz * 0.5;
    vec3 ddy = (ft - fd).xyz * 0.5;
    float divergence = ddx.x + ddy.y;
    vec2 grad = vec2(ddx.z, ddy.z);

    vec4 o = c;
    o.z -= dt * dot(vec3(grad, divergence), c.xyz);

    vec2 lap = fr.xy + fl.xy + ft.xy + fd.xy - 4.0 * c.xy;
    vec2 visc = viscosity_threshold * lap;
    vec2 invariance = (density_k / dt) * grad;

    o.xyw = texture(field, p - dt * c.xy * st).xyw;

    vec2 ext = vec2(0.0);
    if (mouse.w > 1.0 && prev_mouse.z > 1.0) {
        vec2 drag = clamp((mouse.xy - prev_mouse.xy) * st * drag_scale, -drag_limit, drag_limit);
        vec2 d = p - mouse.xy;
        ext += force_gain / (dot(d, d) + 1e-5) * drag;
    }
    o.xy += dt * (visc - invariance + ext);
    o.xy = max(vec2(0.0), abs(o.xy) - velocity_decay) * sign(o.xy);

    o.w = fd.x - ft.x + fr.y - fl.y;
    vec2 vort = vec2(abs(ft.w) - abs(fd.w), abs(fl.w) - abs(fr.w));
    vort *= vorticity_threshold / (length(vort) + 1e-5) * o.w;
    o.xy += vort;

    if (mouse.z > 0.0) {
        float dist = distance(p, mouse.xy);
        if (dist < nudge_radius) {
            o.xy += (mouse.xy - prev_mouse.xy) * (1.0 - dist / nudge_radius) * nudge_gain;
        }
    }

    o.y *= 1.0 - smoothstep(0.48, 0.8, abs(p.y - 0.5));
    o.x *= 1.0 - smoothstep(0.49, 0.5, abs(p.x - 0.5));

    fragColor = clamp(o,
        vec4(vec2(-velocity_threshold), density_range.x, -vorticity_threshold),
        vec4(vec2(velocity_threshold), density_range.y, vorticity_threshold));
}
"""

FS_INK = """
#version 330
in vec2 uv; out vec4 fragColor;
uniform sampler2D velocity;
uniform sampler2D color;
uniform vec2 resolution;
uniform vec4 mouse;
uniform float dt;
uniform float advection_scale;
uniform int splat_on;
uniform vec4 splat_rgba;
uniform float bloom;
uniform float splat_gain;
uniform float splat_falloff;
uniform float splat_radius;
uniform float ink_max;
uniform float ink_decay;
void main(){
    vec2 st = 1.0 / resolution;
    vec2 p = gl_FragCoord.xy / resolution;
    vec2 vel = texture(velocity, p).xy;
    vec4 col = texture(color, p - dt * vel * st * advection_scale);
    if (splat_on == 1) {
        float d = distance(p, mouse.xy);
        if (d <= splat_radius) {
            col += bloom * splat_gain / pow(max(d, 1e-6), splat_falloff) * splat_rgba;
        }
    }
    col = clamp(col, 0.0, ink_max);
    fragColor = max(col - col * ink_decay, 0.0);
}
"""

FS_COMPOSITE = """
#version 330
in vec2 uv; out vec4 fragColor;
uniform sampler2D color;
uniform vec2 resolution;
uniform int pixelated;
uniform float pixel_size;
uniform float border_thickness;
uniform int invert_colors;
void main(){
    vec2 p = gl_FragCoord.xy / resolution;
    vec4 col;
    float blank_rows = 1.0;
    if (pixelated == 1) {
        vec2 dxy = pixel_size / resolution;
        col = texture(color, dxy * floor(p / dxy) + 1.0 / resolution);
        vec2 fr = pixel_size * (fract(gl_FragCoord.xy / pixel_size) - 0.5);
        col *= step(max(fr.x, fr.y) + border_thickness - pixel_size / 2.0, 0.0);
        blank_rows = pixel_size;
    } else {
        col = texture(color, p);
    }
    if (gl_FragCoord.y < blank_rows) {
        col = vec4(0.0);
    }
    vec3 rgb = invert_colors == 1 ? 1.0 - col.rgb : col.rgb;
    fragColor = vec4(clamp(sqrt(max(rgb, 0.0)), 0.0, 1.0), 1.0);
}
"""

FS_SHOW = """
#version 330
in vec2 uv; out vec4 fragColor;
uniform sampler2D frame;
void main(){ fragColor = vec4(texture(frame, uv).rgb, 1.0); }
"""
