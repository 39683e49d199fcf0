# Built-in key bindings. Evaluated by the script bridge before the user's
# config.py, into the same namespace; every name used here is provided by
# the bridge. The user file may rebind or unbind anything defined below.


def _bind_ydc_normal(sequence, start, end):
    bind("d" + sequence, "normal", vim_delete(start, end))
    bind("c" + sequence, "normal", vim_change(start, end))
    bind("y" + sequence, "normal", vim_yank(start, end))


def _bind_forward_normal(sequence, unit):
    _bind_ydc_normal(sequence, "cursor", unit)
    bind(sequence, "normal", cursor_move_forward(unit))


def _bind_backward_normal(sequence, unit):
    _bind_ydc_normal(sequence, backward(unit), "cursor")
    bind(sequence, "normal", cursor_move_backward(unit))


def _prompt_mode(name, prompt, action):
    define_mode(name, "command")
    on_enter(name, run_all([switch_auxline(name), set_auxline_prompt(prompt)]))
    bind("<Esc>", name, cancel_auxline)
    bind("<C-c>", name, clear_auxline)
    bind("<Return>", name, finish_auxline(action))


# normal mode
bind("q", "normal", quit)
bind("i", "normal", push_mode("insert-line"))
bind("I", "normal", push_mode("insert"))
bind("o", "normal", push_mode("roomfilter"))
bind("O", "normal", push_mode("roomfilterunread"))
bind(":", "normal", push_mode("command"))
bind("v", "normal", run_all([push_mode("visual"), select_prev_message]))
bind("L", "normal", push_mode("limit"))
bind("<Esc>", "normal", run_first([clear_error_message, deselect_message, cancel_special_message]))
bind("<C-n>", "normal", select_next_room)
bind("<C-p>", "normal", select_prev_room)
bind("<C-i>", "normal", select_room_history_next)
bind("<C-o>", "normal", select_room_history_prev)
bind("<C-c>", "normal", clear_message)
bind("<Return>", "normal", send_message)

bind("k", "normal", cursor_move_up)
bind("j", "normal", cursor_move_down)
bind("x", "normal", cursor_delete_right)
bind("X", "normal", cursor_delete_left)
bind("a", "normal", run_all([cursor_move_forward("cell"), push_mode("insert-line")]))
bind("A", "normal", run_all([cursor_move_forward("line_separator"), push_mode("insert-line")]))

_bind_forward_normal("l", "cell")
_bind_forward_normal("$", "line_separator")
_bind_forward_normal("w", "word_begin")
_bind_forward_normal("W", "WORD_begin")
_bind_forward_normal("e", "word_end")
_bind_forward_normal("E", "WORD_end")
_bind_forward_normal(")", "sentence")
_bind_forward_normal("G", "document_boundary")

_bind_backward_normal("h", "cell")
_bind_backward_normal("0", "line_separator")
_bind_backward_normal("b", "word_begin")
_bind_backward_normal("B", "WORD_begin")
_bind_backward_normal("(", "sentence")
_bind_backward_normal("gg", "document_boundary")

_bind_ydc_normal("iw", "word_begin", "word_end")
_bind_ydc_normal("iW", "WORD_begin", "WORD_end")
bind("dd", "normal", vim_delete("line_separator", "line_separator"))
bind("cc", "normal", vim_change("line_separator", "line_separator"))
bind("yy", "normal", vim_yank("line_separator", "line_separator"))
bind("D", "normal", vim_delete("cursor", "line_separator"))
bind("C", "normal", vim_change("cursor", "line_separator"))
bind("Y", "normal", vim_yank("cursor", "line_separator"))
bind("P", "normal", paste_before)
bind("p", "normal", paste_after)

# insert mode: printable keys and editing keys go to the message buffer
bind("<C-c>", "insert", clear_message)
bind("<Esc>", "insert", run_all([cursor_move_backward("cell"), pop_mode]))

define_mode("insert-line", "insert")
bind("<Return>", "insert-line", send_message)

# room filters: the auxiliary line holds the room name query
for _mode in ("roomfilter", "roomfilterunread"):
    on_enter(_mode, run_all([switch_auxline(_mode), set_auxline_prompt("# ")]))
    on_leave(_mode, clear_auxline)
    bind("<C-n>", _mode, select_next_room)
    bind("<C-p>", _mode, select_prev_room)
    bind("<Esc>", _mode, pop_mode)
    bind("<Return>", _mode, run_all([force_room_selection, pop_mode]))
del _mode

# command line
on_enter("command", run_all([switch_auxline("command"), set_auxline_prompt(":")]))
bind("<Esc>", "command", cancel_auxline)
bind("<Return>", "command", finish_auxline(lambda c, content: c.run(content)))


def _apply_limit(c):
    content = c.get_auxline_content()
    result = res_ok()
    if content:
        c.accept_auxline()
        result = c.set_filter(content)
    else:
        c.clear_filter()
    c.pop_mode()
    return result


define_mode("limit", "command")
on_enter("limit", run_all([switch_auxline("limit"), set_auxline_prompt("Limit: ")]))
bind("<Esc>", "limit", cancel_auxline)
bind("<C-c>", "limit", clear_auxline)
bind("<Return>", "limit", _apply_limit)

_prompt_mode("send-file", "Send file: ", lambda c, content: c.send_file(content))
_prompt_mode("save-file", "Save file as: ", lambda c, content: c.save_file(content))
_prompt_mode("react", "React with: ", lambda c, content: c.react(content))

# visual mode: message selection
define_mode("visual", "normal")
bind("k", "visual", select_prev_message)
bind("j", "visual", select_next_message)
bind("f", "visual", follow_reply)
bind("r", "visual", run_all([start_reply, deselect_message, switch_mode("insert-line")]))
bind("R", "visual", push_mode("react"))
bind("c", "visual", run_all([start_edit, deselect_message, switch_mode("insert-line")]))
bind("s", "visual", push_mode("save-file"))
bind(":", "visual", push_mode("command"))
bind("<Esc>", "visual", run_all([deselect_message, pop_mode]))
bind("<Return>", "visual", open_selected_message)


def _yank_message(c):
    c.set_clipboard(c.get_message_content())
    return res_ok()


bind("y", "visual", _yank_message)

# command line aliases
e = clear_timeline_cache
q = quit
