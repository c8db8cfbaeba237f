from storefront.notifications.events import OrderEvent
from storefront.notifications.channels import Channel


NOTIFICATION_RULES = {

    OrderEvent.ORDER_PLACED: {
        Channel.EMAIL_CUSTOMER: True,
        Channel.TELEGRAM_ADMIN: True,
    },

    OrderEvent.STATUS_CHANGED: {
        Channel.EMAIL_CUSTOMER: True,
        Channel.TELEGRAM_ADMIN: False,
    },

}
