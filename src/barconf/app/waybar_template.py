"""Bundled Omarchy-style Waybar template.

New profiles and profile resets are materialized from these fragments. Every
accessor returns a fresh deep copy so callers may mutate the result.

// [LAW:one-source-of-truth] The default bar lives here and nowhere else.
"""

from __future__ import annotations

import copy


DEFAULT_PROFILE_ID = "default"
DEFAULT_PROFILE_NAME = "default"


_LAYOUT: dict[str, list[str]] = {
    "left": ["custom/omarchy", "hyprland/workspaces"],
    "center": ["clock", "custom/update", "custom/screenrecording-indicator"],
    "right": [
        "group/tray-expander",
        "bluetooth",
        "network",
        "pulseaudio",
        "cpu",
        "battery",
    ],
}

_GLOBALS: dict[str, object] = {
    "layer": "top",
    "position": "top",
    "spacing": 0,
    "height": 26,
}

# Keys Waybar understands that barconf does not model; copied verbatim.
_PASSTHROUGH: dict[str, object] = {
    "reload_style_on_change": True,
}

_MODULES: dict[str, dict[str, object]] = {
    "hyprland/workspaces": {
        "on-click": "activate",
        "format": "{icon}",
        "format-icons": {
            "default": "○",
            "active": "●",
            "1": "1",
            "2": "2",
            "3": "3",
            "4": "4",
            "5": "5",
        },
        "persistent-workspaces": {"1": [], "2": [], "3": [], "4": [], "5": []},
    },
    "custom/omarchy": {
        "format": "<span font='omarchy'>\ue900</span>",
        "on-click": "omarchy-menu",
        "tooltip-format": "Omarchy Menu\n\nSuper + Alt + Space",
    },
    "custom/update": {
        "format": "\uf021",
        "exec": "omarchy-update-available",
        "on-click": "omarchy-launch-floating-terminal-with-presentation omarchy-update",
        "tooltip-format": "Omarchy update available",
        "signal": 7,
        "interval": 3600,
    },
    "custom/screenrecording-indicator": {
        "on-click": "omarchy-cmd-screenrecord",
        "exec": "$OMARCHY_PATH/default/waybar/indicators/screen-recording.sh",
        "signal": 8,
        "return-type": "json",
    },
    "cpu": {
        "interval": 5,
        "format": "\U000f035b",
        "on-click": "omarchy-launch-or-focus-tui btop",
    },
    "clock": {
        "format": "{:L%A %H:%M}",
        "format-alt": "{:L%d %B W%V %Y}",
        "tooltip": False,
        "on-click-right": "omarchy-launch-floating-terminal-with-presentation omarchy-tz-select",
    },
    "network": {
        "format-icons": ["\U000f092f", "\U000f091f", "\U000f0922", "\U000f0925", "\U000f0928"],
        "format": "{icon}",
        "format-wifi": "{icon}",
        "format-ethernet": "\U000f0200",
        "format-disconnected": "\U000f092e",
        "tooltip-format-wifi": "{essid} ({frequency} GHz)\n⇣{bandwidthDownBytes}  ⇡{bandwidthUpBytes}",
        "tooltip-format-ethernet": "⇣{bandwidthDownBytes}  ⇡{bandwidthUpBytes}",
        "tooltip-format-disconnected": "Disconnected",
        "interval": 3,
        "spacing": 1,
        "on-click": "omarchy-launch-wifi",
    },
    "battery": {
        "format": "{capacity}% {icon}",
        "format-discharging": "{icon}",
        "format-charging": "{icon}",
        "format-plugged": "\uf1e6",
        "format-icons": {
            "charging": ["\U000f089c", "\U000f0086", "\U000f0087", "\U000f0088", "\U000f0089"],
            "default": ["\U000f007a", "\U000f007c", "\U000f007e", "\U000f0080", "\U000f0079"],
        },
        "format-full": "\U000f0085",
        "tooltip-format-discharging": "{power:>1.0f}W↓ {capacity}%",
        "tooltip-format-charging": "{power:>1.0f}W↑ {capacity}%",
        "interval": 5,
        "on-click": "omarchy-menu power",
        "states": {"warning": 20, "critical": 10},
    },
    "bluetooth": {
        "format": "\uf294",
        "format-off": "\U000f00b2",
        "format-disabled": "\U000f00b2",
        "format-connected": "\U000f00b1",
        "format-no-controller": "",
        "tooltip-format": "Devices connected: {num_connections}",
        "on-click": "omarchy-launch-bluetooth",
    },
    "pulseaudio": {
        "format": "{icon}",
        "on-click": "omarchy-launch-or-focus-tui wiremix",
        "on-click-right": "pamixer -t",
        "tooltip-format": "Playing at {volume}%",
        "scroll-step": 5,
        "format-muted": "\U000f075f",
        "format-icons": {"default": ["\uf026", "\uf027", "\uf028"]},
    },
    "group/tray-expander": {
        "orientation": "inherit",
        "drawer": {"transition-duration": 600, "children-class": "tray-group-item"},
        "modules": ["custom/expand-icon", "tray"],
    },
    "custom/expand-icon": {
        "format": "\uf053 ",
        "tooltip": False,
    },
    "tray": {
        "icon-size": 12,
        "spacing": 17,
    },
}

_STYLE_CSS = """\
@import "../omarchy/current/theme/waybar.css";

* {
  background-color: @background;
  color: @foreground;

  border: none;
  border-radius: 0;
  min-height: 0;
  font-family: 'JetBrainsMono Nerd Font';
  font-size: 12px;
}

.modules-left {
  margin-left: 8px;
}

.modules-right {
  margin-right: 8px;
}

#workspaces button {
  all: initial;
  padding: 0 6px;
  margin: 0 1.5px;
  min-width: 9px;
}

#workspaces button.empty {
  opacity: 0.5;
}

#cpu,
#battery,
#pulseaudio,
#custom-omarchy,
#custom-update {
  min-width: 12px;
  margin: 0 7.5px;
}

#tray {
  margin-right: 16px;
}

#bluetooth {
  margin-right: 17px;
}

#network {
  margin-right: 13px;
}

#custom-expand-icon {
  margin-right: 18px;
}

tooltip {
  padding: 2px;
}

#custom-update {
  font-size: 10px;
}

#clock {
  margin-left: 8.75px;
}

.hidden {
  opacity: 0;
}

#custom-screenrecording-indicator {
  min-width: 12px;
  margin-left: 8.75px;
  font-size: 10px;
}

#custom-screenrecording-indicator.active {
  color: #a55555;
}
"""


def template_layout() -> dict[str, list[str]]:
    return copy.deepcopy(_LAYOUT)


def template_globals() -> dict[str, object]:
    return copy.deepcopy(_GLOBALS)


def template_passthrough() -> dict[str, object]:
    return copy.deepcopy(_PASSTHROUGH)


def template_modules() -> dict[str, dict[str, object]]:
    return copy.deepcopy(_MODULES)


def template_style_css() -> str:
    return _STYLE_CSS
