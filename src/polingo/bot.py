"""Main Telegram bot module."""
import logging
from html import escape
from typing import List, Optional, Tuple

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import BadRequest
from telegram.ext import CallbackContext

from polingo.models.base import SessionLocal
from polingo.models.word import LEVELS, WordRecord
from polingo.services.dictionary_service import filter_words
from polingo.services.language_service import LANGUAGES, LanguageSelection, LanguageService
from polingo.services.learning_service import LearningSession, WordAction
from polingo.services.storage import SqlKeyValueStore, StorageError
from polingo.services.word_codec import WordDecodeError
from polingo.services.word_list_client import WordListClient, WordListError
from polingo.services.word_service import Collection, WordService

# Get logger for this module
logger = logging.getLogger(__name__)

# Conversation states
MAIN_MENU, SEARCHING = range(2)

# Button texts
MENU = "🏠 Menu"
WORDS = "📖 Words"
DICTIONARY = "📚 Dictionary"
SETTINGS = "⚙️ Settings"
KNOWN = "✅ Known"
TO_LEARN = "❌ To learn"
CHANGE_LANGUAGE = "🌐 Change Language"
CLEAR_ALL_DATA = "🗑️ Clear All Data"
RESET_PROGRESS = "🔄 Reset Progress"


def msg_back_to(text: str) -> str: return f"🔙 {text}"


KB_BACK_TO_MENU = [[InlineKeyboardButton(msg_back_to(MENU), callback_data="back_to_menu")]]

ERR_MSG_NO_LANGUAGE = "Please select a language from the settings."
ERR_KB_NO_LANGUAGE = [
    [InlineKeyboardButton("Go to Settings", callback_data="settings_language")],
    KB_BACK_TO_MENU[0],
]

# user_data keys
SESSION_KEY = "learning_session"
SESSION_LANGUAGE_KEY = "learning_session_language"
DICTIONARY_TAB_KEY = "dictionary_tab"
DICTIONARY_LEVEL_KEY = "dictionary_level"
DICTIONARY_SEARCH_KEY = "dictionary_search"
DICTIONARY_VIEW_KEY = "dictionary_view"
DICTIONARY_PAGE_KEY = "dictionary_page"

# Telegram rejects keyboards with about a hundred buttons
DICTIONARY_PAGE_SIZE = 20

word_list_client = WordListClient()


def get_services(db, user_id: int) -> Tuple[WordService, LanguageService]:
    """Build the storage-backed services for one Telegram user."""
    store = SqlKeyValueStore(db, user_id)
    return WordService(store), LanguageService(store)


async def log_received(update: Update, context_type: str) -> None:
    """Log message."""
    txt = ""
    if update.callback_query:
        txt = f" {update.callback_query.data}"
    elif update.message:
        txt = f" {update.message.text}"
    user = update.effective_user
    logger.info(f"Received @{context_type:8} from user {user.username} ({user.id}){txt}")


async def reply(update: Update, text: str, keyboard: List[List[InlineKeyboardButton]]) -> None:
    """Edit the current message for callbacks, send a new one otherwise."""
    reply_markup = InlineKeyboardMarkup(keyboard)
    if update.callback_query:
        try:
            await update.callback_query.edit_message_text(text, reply_markup=reply_markup, parse_mode="HTML")
        except BadRequest as e:
            # Telegram rejects edits that leave the message unchanged
            logger.warning(f"Error editing message: {e}")
    else:
        await update.message.reply_text(text, reply_markup=reply_markup, parse_mode="HTML")


async def send_popup_message(update: Update, text: str) -> None:
    """Show an alert-style popup, or a plain message outside callbacks."""
    if update.callback_query:
        await update.callback_query.answer(text=text, show_alert=True)
    else:
        await update.message.reply_text(f"⚠️ {text}")


async def handle_start(update: Update, context: CallbackContext) -> int:
    """Start the conversation and show main menu."""
    await log_received(update, "start")

    db = SessionLocal()
    try:
        _, language_service = get_services(db, update.effective_user.id)
        language = language_service.get()
    finally:
        db.close()

    keyboard = [
        [InlineKeyboardButton(WORDS, callback_data="words")],
        [InlineKeyboardButton(DICTIONARY, callback_data="dictionary")],
        [InlineKeyboardButton(SETTINGS, callback_data="settings")],
    ]
    language_line = f"Learning: {escape(language.name or language.two_letter_code)}" if language else ERR_MSG_NO_LANGUAGE
    message = (f"Welcome to Polingo, {escape(update.effective_user.first_name or '')}! 👋\n\n"
               "Swipe through Oxford's 5000 words and build your dictionary.\n"
               f"{language_line}")

    await reply(update, message, keyboard)
    return MAIN_MENU


async def handle_callback(update: Update, context: CallbackContext) -> int:
    """Handle callback queries from inline keyboard."""
    query = update.callback_query
    await log_received(update, "callback")

    data = query.data
    if data == "back_to_menu":
        await query.answer()
        return await handle_start(update, context)
    elif data == "words" or data.startswith("words_"):
        return await handle_words(update, context)
    elif data == "dictionary" or data.startswith("dictionary_"):
        return await handle_dictionary(update, context)
    elif data == "settings" or data.startswith("settings_") or data.startswith("set_language_"):
        return await handle_settings(update, context)

    await query.answer()
    return MAIN_MENU


async def handle_message(update: Update, context: CallbackContext) -> int:
    """Handle messages outside of a search."""
    await log_received(update, "message")
    await update.message.reply_text("Please start with /start")
    return MAIN_MENU


# Words

def get_learning_session(context: CallbackContext) -> LearningSession:
    session = context.user_data.get(SESSION_KEY)
    if session is None:
        session = LearningSession()
        context.user_data[SESSION_KEY] = session
    return session


async def load_words(
    word_service: WordService,
    session: LearningSession,
    language: LanguageSelection,
) -> Optional[str]:
    """Load unseen words for the session level. Returns an error message on failure.

    On failure the session keeps its current words.
    """
    try:
        words = await word_list_client.fetch_unseen(word_service, language.two_letter_code, session.level)
    except WordListError as e:
        logger.error(f"Error loading words: {e}")
        return (f"Could not load words for {language.name} ({language.two_letter_code}) "
                f"at level {session.level.upper()}. Please try another language or level.")
    session.load(words)
    return None


def render_words(session: LearningSession, language: LanguageSelection) -> Tuple[str, List[List[InlineKeyboardButton]]]:
    """Build the word card text and keyboard."""
    header = (f"Level: {session.level.upper()}\n"
              "<b>Oxford's 5000 Words</b>\n"
              f"{session.counter_text()} words left • {escape(language.name or language.two_letter_code)}\n\n")

    keyboard = []
    word = session.current
    if not session.words:
        body = "No more words to learn at this level!"
    elif word is None:
        body = "You've completed all words! Change level or check your dictionary."
    else:
        body = f"<b>{escape(word.term)}</b>\n{escape(word.meaning)}"
        keyboard.append([
            InlineKeyboardButton(KNOWN, callback_data="words_known"),
            InlineKeyboardButton(TO_LEARN, callback_data="words_to_learn"),
        ])

    keyboard.append([
        InlineKeyboardButton("◀️", callback_data="words_level_prev"),
        InlineKeyboardButton("🔄", callback_data="words_refresh"),
        InlineKeyboardButton("▶️", callback_data="words_level_next"),
    ])
    keyboard.extend(KB_BACK_TO_MENU)
    return header + body, keyboard


async def handle_words(update: Update, context: CallbackContext) -> int:
    """Show the current word and process known / to-learn decisions."""
    query = update.callback_query
    data = query.data
    session = get_learning_session(context)

    db = SessionLocal()
    try:
        word_service, language_service = get_services(db, update.effective_user.id)
        language = language_service.get()
        if not language:
            await query.answer()
            await reply(update, ERR_MSG_NO_LANGUAGE, ERR_KB_NO_LANGUAGE)
            return MAIN_MENU

        error = None
        reload = context.user_data.get(SESSION_LANGUAGE_KEY) != language.two_letter_code
        if data == "words_known" or data == "words_to_learn":
            action = WordAction.KNOWN if data == "words_known" else WordAction.TO_LEARN
            if session.current is not None:
                result = session.classify(word_service, action)
                if not result.saved:
                    error = "Could not save the word. Please try again."
                reload = result.exhausted or reload
        elif data == "words_level_prev" or data == "words_level_next":
            reload = session.change_level(data.rsplit("_", 1)[1]) or reload
        elif data == "words_refresh":
            reload = True

        if reload:
            load_error = await load_words(word_service, session, language)
            if load_error is None:
                context.user_data[SESSION_LANGUAGE_KEY] = language.two_letter_code
            error = error or load_error

        if error:
            await send_popup_message(update, error)
        else:
            await query.answer()

        text, keyboard = render_words(session, language)
        await reply(update, text, keyboard)
        return MAIN_MENU
    finally:
        db.close()


# Dictionary

def render_dictionary(
    context: CallbackContext,
    to_learn: List[WordRecord],
    processing: List[WordRecord],
) -> Tuple[str, List[List[InlineKeyboardButton]]]:
    """Build the dictionary tab text and keyboard.

    The filtered words are kept in user_data so buttons can refer to them by
    index. Only one page of DICTIONARY_PAGE_SIZE words gets a button.
    """
    tab = context.user_data.get(DICTIONARY_TAB_KEY, Collection.TO_LEARN.value)
    level = context.user_data.get(DICTIONARY_LEVEL_KEY)
    search = context.user_data.get(DICTIONARY_SEARCH_KEY, "")

    words = to_learn if tab == Collection.TO_LEARN.value else processing
    view = filter_words(words, search=search, level=level)
    context.user_data[DICTIONARY_VIEW_KEY] = view

    pages = max((len(view) + DICTIONARY_PAGE_SIZE - 1) // DICTIONARY_PAGE_SIZE, 1)
    page = min(max(context.user_data.get(DICTIONARY_PAGE_KEY, 0), 0), pages - 1)
    context.user_data[DICTIONARY_PAGE_KEY] = page
    start = page * DICTIONARY_PAGE_SIZE

    def mark(text: str, active: bool) -> str:
        return f"• {text} •" if active else text

    keyboard = [[
        InlineKeyboardButton(mark(f"To be Learned ({len(to_learn)})", tab == Collection.TO_LEARN.value),
                             callback_data="dictionary_tab_toLearn"),
        InlineKeyboardButton(mark(f"Being Processed ({len(processing)})", tab == Collection.PROCESSING.value),
                             callback_data="dictionary_tab_processing"),
    ]]
    keyboard.append(
        [InlineKeyboardButton(mark("All", not level), callback_data="dictionary_level_all")]
        + [InlineKeyboardButton(mark(lvl.upper(), level == lvl), callback_data=f"dictionary_level_{lvl}")
           for lvl in LEVELS]
    )

    icon = "⬜" if tab == Collection.TO_LEARN.value else "🗑️"
    for i, word in enumerate(view[start:start + DICTIONARY_PAGE_SIZE], start):
        label = f"{icon} {word.term} - {word.meaning} ({(word.level or '?').upper()})"
        keyboard.append([InlineKeyboardButton(label, callback_data=f"dictionary_word_{i}")])

    if pages > 1:
        keyboard.append([
            InlineKeyboardButton("◀️", callback_data=f"dictionary_page_{max(page - 1, 0)}"),
            InlineKeyboardButton(f"{page + 1}/{pages}", callback_data=f"dictionary_page_{page}"),
            InlineKeyboardButton("▶️", callback_data=f"dictionary_page_{min(page + 1, pages - 1)}"),
        ])

    keyboard.append([
        InlineKeyboardButton("🔍 Search", callback_data="dictionary_search"),
        InlineKeyboardButton("🔄", callback_data="dictionary_refresh"),
    ])
    keyboard.extend(KB_BACK_TO_MENU)

    text = "📚 Dictionary\n"
    if search:
        text += f"Search: <i>{escape(search)}</i>\n"
    if not view:
        text += "\nNo words in this category."
    elif tab == Collection.TO_LEARN.value:
        text += "\nTap a word to move it to processing."
    else:
        text += "\nTap a word to delete it."
    return text, keyboard


def get_view_word(context: CallbackContext, data: str) -> Optional[WordRecord]:
    """Resolve a ``..._{index}`` callback against the last rendered view."""
    view = context.user_data.get(DICTIONARY_VIEW_KEY) or []
    try:
        index = int(data.rsplit("_", 1)[1])
    except ValueError:
        return None
    return view[index] if 0 <= index < len(view) else None


async def handle_dictionary(update: Update, context: CallbackContext) -> int:
    """Browse to-learn and processing words, move and delete them."""
    query = update.callback_query
    data = query.data

    if data == "dictionary_search":
        await query.answer()
        await reply(update, "🔍 Send a word or meaning to search for.\nSend - to clear the search.",
                    [[InlineKeyboardButton(msg_back_to(DICTIONARY), callback_data="dictionary")]])
        return SEARCHING

    db = SessionLocal()
    try:
        word_service, _ = get_services(db, update.effective_user.id)

        notice = None
        if data.startswith("dictionary_tab_"):
            context.user_data[DICTIONARY_TAB_KEY] = data[len("dictionary_tab_"):]
            context.user_data[DICTIONARY_PAGE_KEY] = 0
        elif data.startswith("dictionary_level_"):
            level = data[len("dictionary_level_"):]
            context.user_data[DICTIONARY_LEVEL_KEY] = None if level == "all" else level
            context.user_data[DICTIONARY_PAGE_KEY] = 0
        elif data.startswith("dictionary_page_"):
            page = data[len("dictionary_page_"):]
            if page.isdigit():
                context.user_data[DICTIONARY_PAGE_KEY] = int(page)
        elif data.startswith("dictionary_word_"):
            word = get_view_word(context, data)
            tab = context.user_data.get(DICTIONARY_TAB_KEY, Collection.TO_LEARN.value)
            if word is None:
                notice = "This word is no longer listed."
            elif tab == Collection.TO_LEARN.value:
                try:
                    word_service.move_to_processing(word)
                except (StorageError, WordDecodeError) as e:
                    logger.error(f"Error moving word to processing: {e}")
                    notice = "Could not move the word. Please try again."
            else:
                await query.answer()
                index = data.rsplit("_", 1)[1]
                await reply(update, f'Are you sure you want to delete "{escape(word.term)}" permanently?', [[
                    InlineKeyboardButton("Cancel", callback_data="dictionary"),
                    InlineKeyboardButton("Delete", callback_data=f"dictionary_delete_{index}"),
                ]])
                return MAIN_MENU
        elif data.startswith("dictionary_delete_"):
            word = get_view_word(context, data)
            if word is not None:
                try:
                    word_service.delete_from_processing(word)
                except (StorageError, WordDecodeError) as e:
                    logger.error(f"Error deleting word: {e}")
                    notice = "Could not delete the word. Please try again."

        if notice:
            await send_popup_message(update, notice)
        else:
            await query.answer()
        text, keyboard = render_dictionary(
            context, word_service.get_to_learn_words(), word_service.get_processing_words()
        )
        await reply(update, text, keyboard)
        return MAIN_MENU
    finally:
        db.close()


async def handle_search(update: Update, context: CallbackContext) -> int:
    """Apply a search text sent while in the dictionary."""
    await log_received(update, "search")

    text = (update.message.text or "").strip()
    context.user_data[DICTIONARY_SEARCH_KEY] = "" if text == "-" else text
    context.user_data[DICTIONARY_PAGE_KEY] = 0

    db = SessionLocal()
    try:
        word_service, _ = get_services(db, update.effective_user.id)
        text, keyboard = render_dictionary(
            context, word_service.get_to_learn_words(), word_service.get_processing_words()
        )
    finally:
        db.close()

    await reply(update, text, keyboard)
    return MAIN_MENU


# Settings

async def handle_settings(update: Update, context: CallbackContext) -> int:
    """Language selection and data reset."""
    query = update.callback_query
    data = query.data

    db = SessionLocal()
    try:
        word_service, language_service = get_services(db, update.effective_user.id)

        if data == "settings_language":
            await query.answer()
            current = language_service.get_name()
            keyboard = [
                [InlineKeyboardButton(f"{name} ({code}){' ✓' if name == current else ''}",
                                      callback_data=f"set_language_{code}")]
                for code, name in LANGUAGES.items()
            ]
            keyboard.append([InlineKeyboardButton(msg_back_to(SETTINGS), callback_data="settings")])
            await reply(update, "Select Language", keyboard)
            return MAIN_MENU

        if data in ("settings_clear", "settings_reset"):
            await query.answer()
            if data == "settings_clear":
                message = ("Are you sure you want to clear all saved words? "
                           "This action cannot be undone.")
            else:
                message = ("Are you sure you want to reset your progress? "
                           "Your language selection is kept.")
            await reply(update, message, [[
                InlineKeyboardButton("Cancel", callback_data="settings"),
                InlineKeyboardButton("Clear", callback_data=f"{data}_confirm"),
            ]])
            return MAIN_MENU

        notice = None
        if data.startswith("set_language_"):
            code = data[len("set_language_"):]
            name = LANGUAGES.get(code)
            if name and language_service.set(code, name):
                context.user_data.pop(SESSION_KEY, None)
                context.user_data.pop(SESSION_LANGUAGE_KEY, None)
                notice = f"Language set to {name}."
            else:
                notice = "Failed to save the language."
        elif data in ("settings_clear_confirm", "settings_reset_confirm"):
            try:
                word_service.clear_all(keep_language=data == "settings_reset_confirm")
                context.user_data.pop(SESSION_KEY, None)
                context.user_data.pop(SESSION_LANGUAGE_KEY, None)
                notice = "All data has been cleared."
            except StorageError as e:
                logger.error(f"Error clearing data: {e}")
                notice = "Failed to clear data."

        if notice:
            await send_popup_message(update, notice)
        else:
            await query.answer()

        language = language_service.get()
        current = f"{language.name} ({language.two_letter_code})" if language else "not selected"
        keyboard = [
            [InlineKeyboardButton(CHANGE_LANGUAGE, callback_data="settings_language")],
            [InlineKeyboardButton(RESET_PROGRESS, callback_data="settings_reset")],
            [InlineKeyboardButton(CLEAR_ALL_DATA, callback_data="settings_clear")],
        ]
        keyboard.extend(KB_BACK_TO_MENU)
        await reply(update, f"⚙️ Settings\n\nLanguage: {escape(current)}", keyboard)
        return MAIN_MENU
    finally:
        db.close()
