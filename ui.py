# SPDX-License-Identifier: GPL-3.0-or-later
"""
Small Tk window for TinyReplay.

- Record / Play / Loop buttons (ttk styles)
- Speed, loop count and gap fields
- Save / Load / Compress / Clear / Info row
- Mouse-move tracking toggle
- Status section

Everything the window does goes through the Controller; the hotkeys in
main.py call the same methods.
"""
import tkinter as tk
from tkinter import ttk

from controller import Controller

# ---------------- UI palette (dark theme) ----------------
SURFACE        = "#0f141b"
TEXT_DARK      = "#e5e7eb"
TEXT_MUTED     = "#9aa3af"

PRIMARY_GREEN  = "#22c55e"
PRIMARY_BLUE   = "#3b82f6"
PRIMARY_YELLOW = "#facc15"
DANGER_RED     = "#ef4444"


class AppUI:
    def __init__(self, root: tk.Tk, controller: Controller) -> None:
        self.root = root
        self.controller = controller
        self.root.title("TinyReplay")
        self.root.configure(bg=SURFACE)
        self.root.resizable(False, False)

        s = controller.settings
        self.speed_var = tk.StringVar(master=self.root, value=str(s.playback_speed))
        self.loops_var = tk.StringVar(master=self.root, value="1")
        self.gap_var   = tk.StringVar(master=self.root, value=str(s.repeat_gap))
        self.track_moves = tk.BooleanVar(master=self.root, value=s.record_mouse_moves)

        self._build_ui()
        controller.on_playback_change = self._on_playback_change

    def set_status(self, msg: str) -> None:
        self.status.config(text=msg)

    # ---------- Layout ----------
    def _build_ui(self):
        pad = 18
        style = ttk.Style(self.root)
        try:
            style.theme_use("clam")  # predictable colors on macOS
        except tk.TclError:
            pass

        for name, bg, active, size in (
            ("Primary.TButton", PRIMARY_GREEN, "#16a34a", 16),
            ("Info.TButton", PRIMARY_BLUE, "#2563eb", 14),
            ("Danger.TButton", DANGER_RED, "#dc2626", 16),
        ):
            style.configure(name, foreground="white", background=bg,
                            padding=10, font=("Helvetica", size, "bold"), borderwidth=0)
            style.map(name, background=[("active", active)])
        style.configure("Warn.TButton", foreground=SURFACE, background=PRIMARY_YELLOW,
                        padding=8, font=("Helvetica", 12, "bold"), borderwidth=0)
        style.map("Warn.TButton", background=[("active", "#eab308")])

        tk.Label(self.root, text="TinyReplay", bg=SURFACE, fg=TEXT_DARK,
                 font=("Helvetica", 22, "bold")).pack(anchor="w", padx=pad, pady=(pad, 8))

        btn_wrap = tk.Frame(self.root, bg=SURFACE)
        btn_wrap.pack(fill="x", padx=pad, pady=(12, 0))

        self.rec_btn = ttk.Button(btn_wrap, text="Start Recording", style="Primary.TButton",
                                  command=self._toggle_record)
        self.rec_btn.pack(fill="x")
        self.play_btn = ttk.Button(btn_wrap, text="Play Macro", style="Info.TButton",
                                   command=self._toggle_play)
        self.play_btn.pack(fill="x", pady=(10, 0))
        ttk.Button(btn_wrap, text="Loop Forever", style="Info.TButton",
                   command=self._toggle_loop).pack(fill="x", pady=(10, 0))

        # Playback parameters
        params = tk.Frame(self.root, bg=SURFACE)
        params.pack(fill="x", padx=pad, pady=(18, 0))
        for label, var in (("Speed x", self.speed_var), ("Loops", self.loops_var),
                           ("Gap s", self.gap_var)):
            tk.Label(params, text=label, bg=SURFACE, fg=TEXT_DARK).pack(side="left", padx=(0, 6))
            tk.Entry(params, textvariable=var, width=6).pack(side="left", padx=(0, 12))

        # File + misc row
        row = tk.Frame(self.root, bg=SURFACE)
        row.pack(fill="x", padx=pad, pady=(18, 0))
        for text, cmd in (("Save", self.controller.save), ("Load", self.controller.load),
                          ("Compress", self.controller.compress),
                          ("Clear", self.controller.clear), ("Info", self.controller.info)):
            ttk.Button(row, text=text, style="Warn.TButton",
                       command=cmd).pack(side="left", padx=(0, 8))

        tk.Checkbutton(
            self.root, text="Track Mouse Movements", bg=SURFACE, fg=TEXT_DARK,
            variable=self.track_moves, activebackground=SURFACE, selectcolor=SURFACE,
            command=self._toggle_moves
        ).pack(anchor="w", padx=pad, pady=(18, 0))

        status_box = tk.Frame(self.root, bg=SURFACE)
        status_box.pack(fill="x", padx=pad, pady=(20, pad))
        tk.Label(status_box, text="Status", bg=SURFACE, fg=TEXT_DARK,
                 font=("Helvetica", 16, "bold")).pack(anchor="w")
        self.status = tk.Label(status_box, text="Ready.", bg=SURFACE, fg=TEXT_MUTED,
                               justify="left", anchor="w")
        self.status.pack(fill="x", pady=(8, 0))

    # ---------- Actions / helpers ----------
    def _toggle_record(self):
        self.controller.toggle_recording()
        if self.controller.capturing:
            self.rec_btn.config(text="Stop Recording", style="Danger.TButton")
        else:
            self.rec_btn.config(text="Start Recording", style="Primary.TButton")

    def _toggle_play(self):
        if self.controller.player.playing:
            self.controller.stop()
            return
        self._apply_speed()
        loops = self._read(self.loops_var, int, 1)
        gap = max(0.0, self._read(self.gap_var, float, 0.0))
        self.controller.play(loops, gap)

    def _toggle_loop(self):
        self._apply_speed()
        self.controller.toggle_loop()

    def _toggle_moves(self):
        if not self.controller.toggle_mouse_moves():
            self.track_moves.set(self.controller.settings.record_mouse_moves)

    def _apply_speed(self):
        speed = self._read(self.speed_var, float, 1.0)
        if speed != self.controller.player.speed:
            self.controller.set_speed(speed)

    def _on_playback_change(self, playing: bool):
        if playing:
            self.play_btn.config(text="Stop Playback", style="Danger.TButton")
        else:
            self.play_btn.config(text="Play Macro", style="Info.TButton")

    @staticmethod
    def _read(var: tk.StringVar, cast, default):
        try:
            return cast(var.get())
        except ValueError:
            var.set(str(default))
            return default

    def run(self):
        self.root.after(150, self.root.focus_force)
        self.root.mainloop()
