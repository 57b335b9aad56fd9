from __future__ import annotations

from typing import Tuple

# Canonical registration order of the client's subsystems. Reports list
# entries in exactly this order so successive snapshots diff cleanly.
DEFAULT_PROVIDER_ORDER: Tuple[str, ...] = (
    "file_manager_",
    "business_connection_manager_",
    "channel_recommendation_manager_",
    "chat_manager_",
    "connection_state_manager_",
    "inline_message_manager_",
    "online_manager_",
    "promo_data_manager_",
    "star_manager_",
    "terms_of_service_manager_",
    "user_manager_",
    "account_manager_",
    "animations_manager_",
    "attach_menu_manager_",
    "audios_manager_",
    "auth_manager_",
    "autosave_manager_",
    "background_manager_",
    "boost_manager_",
    "bot_info_manager_",
    "business_manager_",
    "callback_queries_manager_",
    "common_dialog_manager_",
    "country_info_manager_",
    "dialog_action_manager_",
    "dialog_filter_manager_",
    "dialog_invite_link_manager_",
    "dialog_manager_",
    "dialog_participant_manager_",
    "documents_manager_",
    "download_manager_",
    "file_reference_manager_",
    "forum_topic_manager_",
    "game_manager_",
    "group_call_manager_",
    "inline_queries_manager_",
    "link_manager_",
    "message_import_manager_",
    "messages_manager_",
    "notification_manager_",
    "notification_settings_manager_",
    "option_manager_",
    "people_nearby_manager_",
    "poll_manager_",
    "privacy_manager_",
    "quick_reply_manager_",
    "reaction_manager_",
    "saved_messages_manager_",
    "sponsored_message_manager_",
    "statistics_manager_",
    "stickers_manager_",
    "story_manager_",
    "theme_manager_",
    "time_zone_manager_",
    "top_dialog_manager_",
    "transcription_manager_",
    "translation_manager_",
    "updates_manager_",
    "video_notes_manager_",
    "videos_manager_",
    "voice_notes_manager_",
    "web_pages_manager_",
)


def order_names(names) -> Tuple[str, ...]:
    """
    Known names first, in canonical order; unknown names afterwards in the
    order they were given.
    """
    given = list(dict.fromkeys(str(n) for n in names))
    present = set(given)
    known = [n for n in DEFAULT_PROVIDER_ORDER if n in present]
    canonical = set(DEFAULT_PROVIDER_ORDER)
    extra = [n for n in given if n not in canonical]
    return tuple(known + extra)
