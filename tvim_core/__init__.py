"""tmux-vim: a persistent editor pane per tmux window."""
