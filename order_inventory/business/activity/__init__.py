from order_inventory.business.activity.activity_log import ActivityLog, SqlActivityLog

__all__ = ['ActivityLog', 'SqlActivityLog']
