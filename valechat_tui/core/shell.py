"""Application shell: routes every event to the right pane and owns the panes.

The shell is driven by one thread.  ``handle_event`` applies a single
event (terminal input or an application event posted by a background
task) and ``render`` paints the current state into a ``Canvas``.  Anything
that touches the backend runs through ``spawn`` and reports back only by
posting events, so component state is never touched off the dispatch
thread.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from ..commands import CommandExecutor, is_command, parse
from ..constants import (
    DEFAULT_CONVERSATION_TITLE,
    FOCUS_KEY_HINTS,
    FOCUS_STATUS,
    SIDEBAR_WIDTH,
)
from ..events import (
    CommandCompleted,
    ConversationCreated,
    ConversationDeleted,
    ConversationLoaded,
    ConversationRenamed,
    ConversationsLoaded,
    CreateNewConversation,
    Error,
    Event,
    Key,
    MessageReceived,
    Mouse,
    Quit,
    Resize,
    SendMessage,
    SetModel,
    SetProvider,
    StatusUpdate,
    Tick,
)
from ..log import logger
from ..theme import DEFAULT_THEME, Theme, get_theme
from ..widgets import (
    Canvas,
    ChatView,
    ConnectionStatus,
    ConversationList,
    HelpOverlay,
    InputBox,
    KeyHint,
    Rect,
    RenameOverlay,
    StatusBar,
)
from .collaborators import Backend, CollaboratorError, NewConversation
from .conversation import ChatMessage
from .state import (
    FOCUS_SHORTCUTS,
    FocusTarget,
    RenameModal,
    ShellState,
    close_modal,
    focus_next,
    focus_previous,
    focus_to,
    open_rename,
    request_quit,
    toggle_help,
)

Spawn = Callable[[Callable[[], None]], object]
SendEvent = Callable[[Event], None]

EMPTY_TITLE_ERROR = "Conversation name cannot be empty"


@dataclass(frozen=True)
class Layout:
    sidebar: Rect
    chat: Rect
    input: Rect
    status: Rect


def compute_layout(width: int, height: int, input_height: int) -> Layout:
    """Sidebar on the left, chat above input on the right, status bar last row."""
    body_height = max(0, height - 1)
    sidebar_width = min(SIDEBAR_WIDTH, width // 3)
    right_width = max(0, width - sidebar_width)
    input_height = min(input_height, max(0, body_height - 3))
    chat_height = max(0, body_height - input_height)
    return Layout(
        sidebar=Rect(0, 0, sidebar_width, body_height),
        chat=Rect(sidebar_width, 0, right_width, chat_height),
        input=Rect(sidebar_width, chat_height, right_width, input_height),
        status=Rect(0, body_height, width, 1 if height > 0 else 0),
    )


class AppShell:
    """Focus and modal router plus the application event handlers."""

    def __init__(
        self,
        backend: Backend,
        send_event: SendEvent,
        *,
        theme: Theme | None = None,
        provider: str | None = None,
        model: str | None = None,
        show_timestamps: bool = True,
        spawn: Spawn | None = None,
        executor: CommandExecutor | None = None,
        save_provider: Callable[[str], None] | None = None,
        save_model: Callable[[str], None] | None = None,
    ) -> None:
        self.backend = backend
        self.send_event = send_event
        self.theme = theme or DEFAULT_THEME
        self.provider = provider or None
        self.model = model or None
        self.commands = executor or CommandExecutor(backend, send_event)
        self._save_provider = save_provider
        self._save_model = save_model

        self.state = ShellState()
        self.conversation_list = ConversationList()
        self.chat_view = ChatView(show_timestamps=show_timestamps)
        self.input_box = InputBox()
        self.help = HelpOverlay()
        self.status_bar = StatusBar()

        self.active_conversation_id: str | None = None
        self.width = 80
        self.height = 24
        self._creating = False
        self._queued_sends: list[str] = []
        # Messages shown while a load of the active conversation is in flight,
        # paired with whether the backend also stores them.
        self._loads_in_flight: dict[str, int] = {}
        self._unsynced: list[tuple[ChatMessage, bool]] = []

        self._pool: ThreadPoolExecutor | None = None
        self._spawn = spawn or self._spawn_in_pool

    # -- lifecycle --------------------------------------------------------------

    def start(self) -> None:
        """Show the initial status and load the conversation list."""
        self._refresh_model_info()
        self._update_focus_hints()
        self.status_bar.set_status("ValeChat initialized")
        self.load_conversations()

    def shutdown(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None

    @property
    def should_quit(self) -> bool:
        return self.state.should_quit

    @property
    def focus(self) -> FocusTarget:
        return self.state.focus

    # -- background tasks -------------------------------------------------------

    def _spawn_in_pool(self, fn: Callable[[], None]) -> object:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="valechat")
        return self._pool.submit(fn)

    def _run_background(
        self,
        operation: str,
        task: Callable[[], Event | None],
        conversation_id: str | None = None,
    ) -> None:
        """Run *task* off the dispatch thread and post its result event."""

        def runner() -> None:
            try:
                result = task()
            except Exception as exc:
                logger.debug("background %s failed", operation, exc_info=True)
                self.send_event(Error(str(exc) or type(exc).__name__, conversation_id, operation))
                return
            if result is not None:
                self.send_event(result)

        self._spawn(runner)

    def load_conversations(self, select_id: str | None = None) -> None:
        repo = self.backend.conversations

        def task() -> Event:
            return ConversationsLoaded(tuple(repo.list_conversations()), select_id)

        self._run_background("load", task)

    def load_conversation(self, conversation_id: str, title: str) -> None:
        """Activate *conversation_id* now and fetch its messages."""
        self.active_conversation_id = conversation_id
        self._loads_in_flight[conversation_id] = self._loads_in_flight.get(conversation_id, 0) + 1
        self._unsynced = []
        self.chat_view.reset()
        self.chat_view.set_title(title)
        summary = self.conversation_list.find(conversation_id)
        self.status_bar.update_conversation_cost(summary.total_cost if summary else 0.0)
        self.status_bar.set_status(f"Loading {title}...")
        messages = self.backend.messages

        def task() -> Event:
            return ConversationLoaded(conversation_id, title, tuple(messages.get_messages(conversation_id)))

        self._run_background("load conversation", task, conversation_id)

    def create_conversation(self, follow_up: str | None = None) -> None:
        if self._creating:
            if follow_up:
                self._queued_sends.append(follow_up)
            return
        try:
            provider, model = self.current_provider_and_model()
        except CollaboratorError as exc:
            self.status_bar.set_status(f"Error: {exc}")
            return

        self._creating = True
        self.status_bar.set_status("Creating new conversation...")
        repo = self.backend.conversations
        new = NewConversation(DEFAULT_CONVERSATION_TITLE, provider, model)

        def task() -> Event:
            return ConversationCreated(repo.create_conversation(new), follow_up)

        self._run_background("create", task)

    def delete_conversation(self, conversation_id: str) -> None:
        repo = self.backend.conversations

        def task() -> Event:
            repo.delete_conversation(conversation_id)
            return ConversationDeleted(conversation_id)

        self._run_background("delete", task)

    def rename_conversation(self, conversation_id: str, title: str) -> None:
        repo = self.backend.conversations

        def task() -> Event:
            repo.rename_title(conversation_id, title)
            return ConversationRenamed(conversation_id, title)

        self._run_background("rename", task)

    def send_to_conversation(self, conversation_id: str, text: str) -> None:
        """Show *text* optimistically and ask the provider for a reply."""
        self._show_local(ChatMessage.user(text), stored=True)
        self.status_bar.set_connection(ConnectionStatus.CONNECTING)
        self.status_bar.set_status("Sending message...")
        dispatch = self.backend.provider
        provider, model = self.provider, self.model

        def task() -> Event:
            reply = dispatch.send_message(conversation_id, text, provider, model)
            return MessageReceived(conversation_id, reply.text, reply.model, reply.cost)

        self._run_background("send", task, conversation_id)

    def run_command(self, text: str) -> None:
        command = parse(text)
        if command is None:
            return
        self._show_local(ChatMessage.user(text), stored=False)
        self.status_bar.set_status("Executing command...")
        executor = self.commands
        provider, model = self.provider, self.model

        def task() -> Event:
            return CommandCompleted(executor.execute(command, provider, model))

        self._run_background("command", task)

    # -- provider selection -----------------------------------------------------

    def current_provider_and_model(self) -> tuple[str, str]:
        """The session's provider and model, falling back to the backend default."""
        if self.provider:
            config = self.backend.providers.get(self.provider)
            default_model = config.default_model if config else ""
            return self.provider, self.model or default_model
        name, default_model = self.backend.default_provider_and_model()
        return name, self.model or default_model

    def _refresh_model_info(self) -> None:
        try:
            provider, model = self.current_provider_and_model()
        except CollaboratorError:
            return
        self.status_bar.set_model_info(provider, model)

    # -- focus ------------------------------------------------------------------

    def _set_state(self, state: ShellState) -> None:
        focus_changed = state.focus is not self.state.focus
        self.state = state
        if focus_changed:
            self._update_focus_hints()
            self.status_bar.set_status(FOCUS_STATUS[state.focus.value])

    def _update_focus_hints(self) -> None:
        hints = FOCUS_KEY_HINTS[self.state.focus.value]
        self.status_bar.set_key_hints([KeyHint(key, action) for key, action in hints])

    def _focused_component(self) -> ConversationList | ChatView | InputBox:
        return {
            FocusTarget.CONVERSATION_LIST: self.conversation_list,
            FocusTarget.CHAT_VIEW: self.chat_view,
            FocusTarget.INPUT_BOX: self.input_box,
        }[self.state.focus]

    # -- dispatch ---------------------------------------------------------------

    def handle_event(self, event: Event) -> None:
        """Apply one event to the shell."""
        if isinstance(event, Resize):
            self.width, self.height = event.width, event.height
        elif isinstance(event, Tick):
            self.status_bar.tick()
        elif isinstance(event, (Key, Mouse)):
            self._handle_input(event)
        else:
            self._handle_app_event(event)

    def _handle_input(self, event: Key | Mouse) -> None:
        if self.state.help_visible:
            if isinstance(event, Key) and HelpOverlay.is_close_key(event):
                self._set_state(toggle_help(self.state))
            else:
                self.help.handle(event)
            return

        modal = self.state.renaming
        if modal is not None and isinstance(event, Key):
            self._handle_rename_key(modal, event)
            return

        if isinstance(event, Mouse):
            self._handle_mouse(event)
            return

        if self._handle_global_key(event):
            return
        if self._focused_component().handle(event):
            return
        self._handle_panel_key(event)

    def _handle_rename_key(self, modal: RenameModal, key: Key) -> None:
        overlay = modal.overlay
        if key.code == "enter" and not (key.ctrl or key.alt):
            title = overlay.value
            if not title:
                overlay.set_error(EMPTY_TITLE_ERROR)
                self.status_bar.set_status(f"Error: {EMPTY_TITLE_ERROR}")
                return
            self._set_state(close_modal(self.state))
            self.status_bar.set_status("Renaming conversation...")
            self.rename_conversation(modal.target_id, title)
        elif key.code == "esc":
            self._set_state(close_modal(self.state))
            self.status_bar.set_status("Rename cancelled")
        else:
            overlay.handle(key)

    def _handle_global_key(self, key: Key) -> bool:
        if key.ctrl and key.code in ("c", "q"):
            self._set_state(request_quit(self.state))
            return True
        if key.code == "f1" or (key.ctrl and key.code == "/"):
            self.help.reset()
            self._set_state(toggle_help(self.state))
            return True
        if key.code == "tab":
            if key.shift:
                self._set_state(focus_previous(self.state))
            else:
                self._set_state(focus_next(self.state))
            return True
        if (key.ctrl or key.alt) and key.code in FOCUS_SHORTCUTS:
            self._set_state(focus_to(self.state, FOCUS_SHORTCUTS[key.code]))
            return True
        if key.code == "esc":
            self._set_state(focus_to(self.state, FocusTarget.CONVERSATION_LIST))
            return True
        if key.ctrl and key.code == "n":
            self.create_conversation()
            return True
        return False

    def _handle_panel_key(self, key: Key) -> None:
        focus = self.state.focus
        if focus is FocusTarget.CONVERSATION_LIST:
            if key.ctrl or key.alt:
                return
            selected = self.conversation_list.selected_conversation
            if key.code == "enter" and selected is not None:
                self.load_conversation(selected.id, selected.title)
            elif key.code == "n":
                self.create_conversation()
            elif key.code in ("delete", "d") and selected is not None:
                self.status_bar.set_status("Deleting conversation...")
                self.delete_conversation(selected.id)
            elif key.code == "r":
                self._open_rename()
        elif focus is FocusTarget.INPUT_BOX:
            if key.code == "enter" and not key.shift and not self.input_box.is_blank():
                self.send_event(SendMessage(self.input_box.take_content()))

    def _open_rename(self) -> None:
        selected = self.conversation_list.selected_conversation
        if selected is None:
            self.status_bar.set_status("Error: No conversation selected to rename")
            return
        self._set_state(open_rename(self.state, selected.id, RenameOverlay(selected.title)))
        self.status_bar.set_status("Enter new conversation name (Enter to save, Esc to cancel)")

    def _handle_mouse(self, event: Mouse) -> None:
        layout = self.layout()
        if layout.sidebar.contains(event.x, event.y):
            self.conversation_list.handle(event)
        elif layout.chat.contains(event.x, event.y):
            self.chat_view.handle(event)

    # -- application events -----------------------------------------------------

    def _handle_app_event(self, event: Event) -> None:
        if isinstance(event, SendMessage):
            self._on_send(event.text)
        elif isinstance(event, MessageReceived):
            self._on_message_received(event)
        elif isinstance(event, ConversationsLoaded):
            self._on_conversations_loaded(event)
        elif isinstance(event, ConversationLoaded):
            self._on_conversation_loaded(event)
        elif isinstance(event, ConversationCreated):
            self._on_conversation_created(event)
        elif isinstance(event, ConversationDeleted):
            if self.active_conversation_id == event.conversation_id:
                self.active_conversation_id = None
                self.chat_view.reset()
                self.status_bar.update_conversation_cost(0.0)
            self.status_bar.set_status("Conversation deleted")
            self.load_conversations()
        elif isinstance(event, ConversationRenamed):
            if self.active_conversation_id == event.conversation_id:
                self.chat_view.set_title(event.title)
            self.status_bar.set_status(f"Conversation renamed to '{event.title}'")
            self.load_conversations(select_id=event.conversation_id)
        elif isinstance(event, CommandCompleted):
            self._show_local(ChatMessage.system(event.text), stored=False)
            self.status_bar.set_status("Command executed")
        elif isinstance(event, CreateNewConversation):
            self.create_conversation()
        elif isinstance(event, SetProvider):
            self._on_set_provider(event.name)
        elif isinstance(event, SetModel):
            self.model = event.name or None
            self._refresh_model_info()
            if self._save_model is not None:
                self._save_model(event.name)
        elif isinstance(event, Quit):
            self._set_state(request_quit(self.state))
        elif isinstance(event, Error):
            self._on_error(event)
        elif isinstance(event, StatusUpdate):
            self.status_bar.set_status(event.text)

    def _on_send(self, text: str) -> None:
        if is_command(text) and parse(text) is not None:
            self.run_command(text)
        elif self.active_conversation_id is None:
            self.create_conversation(follow_up=text)
        else:
            self.send_to_conversation(self.active_conversation_id, text)

    def _on_message_received(self, event: MessageReceived) -> None:
        if event.conversation_id != self.active_conversation_id:
            logger.debug("discarding reply for inactive conversation %s", event.conversation_id)
            return
        self._show_local(ChatMessage.assistant(event.text, model=event.model, cost=event.cost), stored=True)
        self.status_bar.set_connection(ConnectionStatus.CONNECTED)
        self.status_bar.set_status(FOCUS_STATUS[FocusTarget.INPUT_BOX.value])
        cost = event.cost or 0.0
        summary = self.conversation_list.find(event.conversation_id)
        if summary is not None:
            summary.message_count += 2
            summary.total_cost += cost
            self.status_bar.update_conversation_cost(summary.total_cost)
        self.status_bar.add_session_cost(cost)

    def _on_conversations_loaded(self, event: ConversationsLoaded) -> None:
        current = self.conversation_list.selected_conversation
        self.conversation_list.set_items(list(event.conversations))
        target = event.select_id or (current.id if current else None) or self.active_conversation_id
        if target is not None:
            self.conversation_list.select_conversation(target)

    def _on_conversation_loaded(self, event: ConversationLoaded) -> None:
        if event.conversation_id != self.active_conversation_id:
            self._finish_load(event.conversation_id)
            logger.debug("discarding load of inactive conversation %s", event.conversation_id)
            return
        self.chat_view.set_title(event.title)
        self.chat_view.set_messages(self._merge_unsynced(list(event.messages)))
        self.status_bar.set_status(f"Loaded {len(event.messages)} messages")
        self._finish_load(event.conversation_id)

    def _show_local(self, message: ChatMessage, stored: bool) -> None:
        self.chat_view.add_message(message)
        if self.active_conversation_id in self._loads_in_flight:
            self._unsynced.append((message, stored))

    def _merge_unsynced(self, loaded: list[ChatMessage]) -> list[ChatMessage]:
        """Append messages shown since the load was issued to its snapshot.

        Stored messages that the snapshot already ends with are not repeated.
        """
        stored = [(m.role, m.text) for m, is_stored in self._unsynced if is_stored]
        tail = [(m.role, m.text) for m in loaded]
        overlap = len(stored)
        while overlap and stored[:overlap] != tail[-overlap:]:
            overlap -= 1
        merged = list(loaded)
        for message, is_stored in self._unsynced:
            if is_stored and overlap:
                overlap -= 1
                continue
            merged.append(message)
        return merged

    def _finish_load(self, conversation_id: str) -> None:
        remaining = self._loads_in_flight.pop(conversation_id, 0) - 1
        if remaining > 0:
            self._loads_in_flight[conversation_id] = remaining
        elif conversation_id == self.active_conversation_id:
            self._unsynced = []

    def _on_conversation_created(self, event: ConversationCreated) -> None:
        self._creating = False
        conversation = event.conversation
        self.conversation_list.insert_front(conversation)
        self.conversation_list.select_conversation(conversation.id)
        self.active_conversation_id = conversation.id
        self.chat_view.reset()
        self.chat_view.set_title(conversation.title)
        self.status_bar.update_conversation_cost(0.0)
        self.status_bar.set_status("New conversation created")

        pending = [event.follow_up] if event.follow_up else []
        pending += self._queued_sends
        self._queued_sends = []
        for text in pending:
            self.send_to_conversation(conversation.id, text)

    def _on_set_provider(self, name: str) -> None:
        self.provider = name or None
        self.model = None
        self._refresh_model_info()
        if self._save_provider is not None:
            self._save_provider(name)

    def _on_error(self, event: Error) -> None:
        if event.operation == "load conversation" and event.conversation_id is not None:
            self._finish_load(event.conversation_id)
        if event.operation == "create":
            self._creating = False
            self._queued_sends = []
        if event.conversation_id is not None and event.conversation_id != self.active_conversation_id:
            logger.debug("discarding error for inactive conversation %s: %s", event.conversation_id, event.text)
            return
        if event.operation == "send":
            self.status_bar.set_connection(ConnectionStatus.ERROR, event.text)
        self.status_bar.set_status(f"Error: {event.text}")

    # -- rendering --------------------------------------------------------------

    def layout(self) -> Layout:
        return compute_layout(self.width, self.height, self.input_box.preferred_height())

    def render(self, canvas: Canvas) -> None:
        """Paint the whole screen; overlays go last."""
        theme = self.theme
        layout = compute_layout(canvas.width, canvas.height, self.input_box.preferred_height())
        focus = self.state.focus
        canvas.clear(canvas.area, theme.normal())

        self.conversation_list.render(
            canvas, layout.sidebar, theme, focused=focus is FocusTarget.CONVERSATION_LIST
        )
        self.chat_view.render(canvas, layout.chat, theme, focused=focus is FocusTarget.CHAT_VIEW)
        self.input_box.render(canvas, layout.input, theme, focused=focus is FocusTarget.INPUT_BOX)
        self.status_bar.render(canvas, layout.status, theme)

        renaming = self.state.renaming
        if renaming is not None:
            renaming.overlay.render(canvas, layout.sidebar, theme)
        if self.state.help_visible:
            self.help.render(canvas, canvas.area, theme)

    def set_theme(self, name: str) -> None:
        self.theme = get_theme(name)
