from twitchio import eventsub


def get_chat_subscriptions(
    broadcaster_user_ids: list[str], bot_id: str
) -> list[eventsub.SubscriptionPayload]:
    """EventSub subscriptions the chat connection needs: chat per channel, whispers once."""
    subs: list[eventsub.SubscriptionPayload] = [
        eventsub.ChatMessageSubscription(broadcaster_user_id=broadcaster_user_id, user_id=bot_id)
        for broadcaster_user_id in broadcaster_user_ids
    ]
    subs.append(eventsub.WhisperReceivedSubscription(user_id=bot_id))
    return subs
