"""
Fix execution subsystem for archsweep.

Modules:
  runner.py   — interactive fix session: sequential confirmation and
                per-probe fix application, with a summary panel.
  executor.py — helpers probes call from apply_fix(): run_fix_command,
                remove_paths.
"""
