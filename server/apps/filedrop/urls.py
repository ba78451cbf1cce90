"""URL configuration for filedrop app."""

from django.urls import path

from server.apps.filedrop import views

app_name = 'filedrop'

urlpatterns = [
    path('', views.upload_form, name='upload-form'),
    path('raw', views.upload_raw, name='upload-raw'),
    path('fd/<str:identifier>', views.download, name='download'),
    path('fd/<str:identifier>/<str:name>', views.download, name='download-named'),
    path('fd/<str:identifier>/<path:rest>', views.download_unrouted),
]
