import os
import logging
from datetime import date

from dotenv import load_dotenv

from telegram import Update
from telegram.error import BadRequest
from telegram.ext import (
    ApplicationBuilder,
    ContextTypes,
    CommandHandler,
    CallbackQueryHandler,
)

from calendar_utils import (  # календарь диапазона: CAL|, DAY|, IGNORE
    CB_DAY,
    CB_NAV,
    CalendarView,
    build_calendar,
)

# ——— НАСТРОЙКИ ——————————————————————————————————
load_dotenv()
BOT_TOKEN       = os.getenv("BOT_TOKEN")
CALENDAR_LOCALE = os.getenv("CALENDAR_LOCALE")
LOG_LEVEL       = os.getenv("LOG_LEVEL", "INFO").upper()


# ——— ЛОГИРОВАНИЕ ——————————————————————————————————
logger = logging.getLogger(__name__)


def resolve_log_level(name: str) -> int:
    level = logging.getLevelName(name)
    # для неизвестного имени getLevelName возвращает строку "Level X"
    if isinstance(level, int):
        return level
    logger.warning("Unknown LOG_LEVEL %r, falling back to INFO", name)
    return logging.INFO


logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s",
                    level=resolve_log_level(LOG_LEVEL))

VIEW_KEY = "calendar"


def get_view(context: ContextTypes.DEFAULT_TYPE) -> CalendarView:
    view = context.user_data.get(VIEW_KEY)
    if view is None:
        view = CalendarView(locale=CALENDAR_LOCALE)
        context.user_data[VIEW_KEY] = view
    return view


async def refresh(query, view: CalendarView):
    try:
        await query.edit_message_text(view.footer(), reply_markup=build_calendar(view))
    except BadRequest as e:
        # повторный клик по той же кнопке: Telegram не даёт отправить то же самое
        if "not modified" not in str(e).lower():
            raise
        logger.debug("calendar message not modified")


# ——— КОМАНДЫ ——————————————————————————————————
async def show_calendar(update: Update, context: ContextTypes.DEFAULT_TYPE):
    view = get_view(context)
    view.month = date.today()
    await update.message.reply_text(view.footer(), reply_markup=build_calendar(view))


async def clear_selection(update: Update, context: ContextTypes.DEFAULT_TYPE):
    view = get_view(context)
    view.clear()
    await update.message.reply_text(view.footer(), reply_markup=build_calendar(view))


async def ignore_cb(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.callback_query.answer()


# ——— КАЛЕНДАРЬ ——————————————————————————————————
async def calendar_cb(update: Update, context: ContextTypes.DEFAULT_TYPE):
    query = update.callback_query
    await query.answer()
    view = get_view(context)
    prefix, _, payload = query.data.partition("|")

    # Листание месяцев
    if prefix == CB_NAV:
        try:
            y, m = map(int, payload.split("|"))
            view.show_month(y, m)
        except ValueError:
            logger.warning("Malformed navigation callback %r", query.data)
            return
        await refresh(query, view)
        return

    # Выбор даты
    if prefix == CB_DAY:
        try:
            chosen = date.fromisoformat(payload)
        except ValueError:
            logger.warning("Malformed day callback %r", query.data)
            return
        view.on_select(chosen)
        logger.info("user %s selection: %s", update.effective_user.id, view.selection)
        await refresh(query, view)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    logger.error("Update %s caused an error", update, exc_info=context.error)


# ——— РЕГИСТРАЦИЯ ——————————————————————————————————
def main():
    if not BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not set; put it in the environment or a .env file")

    app = ApplicationBuilder().token(BOT_TOKEN).build()

    # Команды
    app.add_handler(CommandHandler("start", show_calendar))
    app.add_handler(CommandHandler("calendar", show_calendar))
    app.add_handler(CommandHandler("clear", clear_selection))

    # Календарь
    app.add_handler(CallbackQueryHandler(calendar_cb, pattern=rf"^{CB_NAV}\|"))
    app.add_handler(CallbackQueryHandler(calendar_cb, pattern=rf"^{CB_DAY}\|"))

    # IGNORE глобально
    app.add_handler(CallbackQueryHandler(ignore_cb, pattern=r"^IGNORE$"))

    app.add_error_handler(error_handler)

    app.run_polling()


if __name__ == "__main__":
    main()
